"""Scheduling, storage and delivery of group reminders."""

from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from .schedule import is_due, next_wake_time
from .timer_model import Timer

log = logging.getLogger(__name__)

Sender = Callable[[int, int, list], object]

_MONTH_NAMES = {
    name: number
    for number, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}
_WEEKDAY_NAMES = {
    name: number
    for number, name in enumerate(("sun", "mon", "tue", "wed", "thu", "fri", "sat"))
}
_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}
_SEARCH_YEARS = 5


def _parse_value(text: str, names: dict[str, int] | None) -> int:
    key = text.lower()
    if names and key in names:
        return names[key]
    if not text.isascii() or not text.isdigit():
        raise ValueError(f"failed to parse int from {text!r}")
    return int(text)


def _parse_field(field: str, low: int, high: int, names: dict[str, int] | None):
    values: set[int] = set()
    star = False
    for part in field.split(","):
        if not part:
            raise ValueError(f"empty element in field {field!r}")
        span, has_step, step_text = part.partition("/")
        step = _parse_value(step_text, None) if has_step else 1
        if step <= 0:
            raise ValueError(f"step of range should be a positive number: {part}")
        if span in ("*", "?"):
            start, end = low, high
            if step == 1:
                star = True
        else:
            first, has_end, last = span.partition("-")
            start = _parse_value(first, names)
            if has_end:
                end = _parse_value(last, names)
            else:
                end = high if has_step else start
        if start < low:
            raise ValueError(f"beginning of range ({start}) below minimum ({low}): {part}")
        if end > high:
            raise ValueError(f"end of range ({end}) above maximum ({high}): {part}")
        if start > end:
            raise ValueError(f"beginning of range ({start}) beyond end of range ({end}): {part}")
        values.update(range(start, end + 1, step))
    return frozenset(values), star


def _weekday(moment: datetime) -> int:
    return (moment.weekday() + 1) % 7


@dataclass(frozen=True)
class CronSpec:
    """A five-field cron schedule: minute, hour, day of month, month, weekday."""

    minutes: frozenset
    hours: frozenset
    days: frozenset
    months: frozenset
    weekdays: frozenset
    day_star: bool = False
    weekday_star: bool = False

    @classmethod
    def parse(cls, expr: str) -> CronSpec:
        """Parse a cron expression or one of the ``@daily``-style descriptors."""
        text = expr.strip()
        if text.startswith("@"):
            expanded = _DESCRIPTORS.get(text.lower())
            if expanded is None:
                raise ValueError(f"unrecognized descriptor: {text}")
            text = expanded
        fields = text.split()
        if len(fields) != 5:
            raise ValueError(f"expected exactly 5 fields, found {len(fields)}: {expr}")
        minutes, _ = _parse_field(fields[0], 0, 59, None)
        hours, _ = _parse_field(fields[1], 0, 23, None)
        days, day_star = _parse_field(fields[2], 1, 31, None)
        months, _ = _parse_field(fields[3], 1, 12, _MONTH_NAMES)
        weekdays, weekday_star = _parse_field(fields[4], 0, 6, _WEEKDAY_NAMES)
        return cls(minutes, hours, days, months, weekdays, day_star, weekday_star)

    def _day_matches(self, moment: datetime) -> bool:
        dom = moment.day in self.days
        dow = _weekday(moment) in self.weekdays
        if self.day_star or self.weekday_star:
            return dom and dow
        return dom or dow

    def matches(self, moment: datetime) -> bool:
        """Whether the schedule fires in the minute of ``moment``."""
        return (
            moment.minute in self.minutes
            and moment.hour in self.hours
            and moment.month in self.months
            and self._day_matches(moment)
        )

    def next_after(self, moment: datetime) -> datetime | None:
        """First firing minute strictly after ``moment``, or None within five years."""
        t = moment.replace(second=0, microsecond=0) + timedelta(minutes=1)
        limit_year = t.year + _SEARCH_YEARS
        while t.year <= limit_year:
            if t.month not in self.months:
                if t.month == 12:
                    t = t.replace(year=t.year + 1, month=1, day=1, hour=0, minute=0)
                else:
                    t = t.replace(month=t.month + 1, day=1, hour=0, minute=0)
                continue
            if not self._day_matches(t):
                t = (t + timedelta(days=1)).replace(hour=0, minute=0)
                continue
            if t.hour not in self.hours:
                t = t.replace(minute=0) + timedelta(hours=1)
                continue
            if t.minute not in self.minutes:
                t += timedelta(minutes=1)
                continue
            return t
        return None


class TimerStore:
    """Persistent table of timers kept in SQLite."""

    def __init__(self, path) -> None:
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.Lock()
        with self._lock, self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS timer ("
                "id INTEGER PRIMARY KEY, emdwhm INTEGER NOT NULL, sid INTEGER NOT NULL, "
                "gid INTEGER NOT NULL, alert TEXT NOT NULL, cron TEXT NOT NULL, "
                "url TEXT NOT NULL)"
            )

    def insert(self, timer: Timer) -> None:
        """Store ``timer``, replacing any row with the same id."""
        with self._lock, self._conn:
            self._conn.execute(
                "REPLACE INTO timer (id, emdwhm, sid, gid, alert, cron, url) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    timer.id,
                    timer.packed,
                    timer.self_id,
                    timer.grp_id,
                    timer.alert,
                    timer.cron,
                    timer.url,
                ),
            )

    def delete(self, key: int) -> None:
        with self._lock, self._conn:
            self._conn.execute("DELETE FROM timer WHERE id = ?", (key,))

    def all(self) -> list[Timer]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT id, emdwhm, sid, gid, alert, cron, url FROM timer ORDER BY rowid"
            ).fetchall()
        return [
            Timer(id=r[0], packed=r[1], self_id=r[2], grp_id=r[3], alert=r[4], cron=r[5], url=r[6])
            for r in rows
        ]

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> TimerStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def build_alert(timer: Timer) -> list[dict]:
    """Message segments of a reminder: @all, the alert text and an optional image."""
    segments = [
        {"type": "at", "data": {"qq": "all"}},
        {"type": "text", "data": {"text": timer.alert}},
    ]
    if timer.url:
        segments.append({"type": "image", "data": {"file": timer.url, "cache": "0"}})
    return segments


class Clock:
    """Runs registered timers in background threads and keeps them in a store.

    ``sender`` is called as ``sender(self_id, group_id, segments)`` whenever a
    reminder fires.
    """

    def __init__(self, store: TimerStore, sender: Sender) -> None:
        self._store = store
        self._sender = sender
        self._timers: dict[int, Timer] = {}
        self._jobs: dict[int, threading.Event] = {}
        self._threads: list[threading.Thread] = []
        self._lock = threading.RLock()
        for timer in store.all():
            self.register_timer(timer, False)

    def register_timer(self, ts: Timer, save: bool) -> bool:
        """Start running ``ts``; with ``save`` its id is computed and it is stored.

        Returns False when a cron expression cannot be parsed (the reason is
        put into ``ts.alert``) or a cron timer cannot be stored.
        """
        if save:
            key = ts.timer_id
            ts.id = key
        else:
            key = ts.id
        old = self.get_timer(key)
        if old is not None and old is not ts:
            old.enabled = False
        log.info("[群管]注册计时器 %d", key)
        if ts.cron:
            try:
                spec = CronSpec.parse(ts.cron)
            except ValueError as err:
                ts.alert = str(err)
                return False
            if save:
                try:
                    self.add_timer_into_db(ts)
                except sqlite3.Error as err:
                    log.error("[群管]保存计时器失败: %s", err)
                    return False
            self.add_timer_into_map(ts)
            self._start(key, self._run_cron, ts, spec)
            return True
        if save:
            try:
                self.add_timer_into_db(ts)
            except sqlite3.Error as err:
                log.error("[群管]保存计时器失败: %s", err)
        self.add_timer_into_map(ts)
        self._start(key, self._run_dated, ts)
        return True

    def _start(self, key: int, target, *args) -> None:
        with self._lock:
            previous = self._jobs.pop(key, None)
            if previous is not None:
                previous.set()
            stop = threading.Event()
            self._jobs[key] = stop
            thread = threading.Thread(
                target=target, args=(*args, stop), name=f"timer-{key:08x}", daemon=True
            )
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(thread)
        thread.start()

    def _send(self, ts: Timer) -> None:
        try:
            self._sender(ts.self_id, ts.grp_id, build_alert(ts))
        except Exception:  # a failed delivery must not stop the timer
            log.exception("[群管]发送提醒失败")

    def _run_cron(self, ts: Timer, spec: CronSpec, stop: threading.Event) -> None:
        while True:
            now = datetime.now()
            upcoming = spec.next_after(now)
            if upcoming is None:
                return
            if stop.wait(max(0.0, (upcoming - now).total_seconds())):
                return
            self._send(ts)

    def _run_dated(self, ts: Timer, stop: threading.Event) -> None:
        while ts.enabled:
            now = datetime.now()
            wake = next_wake_time(ts, now)
            delay = max(0.0, (wake - now).total_seconds())
            log.info("[群管]计时器%08x将睡眠%ds", ts.id, int(delay))
            if stop.wait(delay):
                return
            if is_due(ts):
                self._send(ts)

    def cancel_timer(self, key: int) -> bool:
        """Stop and forget the timer with ``key``; False if there is none."""
        timer = self.get_timer(key)
        if timer is None:
            return False
        if not timer.cron:
            timer.enabled = False
        with self._lock:
            stop = self._jobs.pop(key, None)
            if stop is not None:
                stop.set()
            self._timers.pop(key, None)
            try:
                self._store.delete(key)
            except sqlite3.Error:
                return False
        return True

    def list_timers(self, grp_id: int) -> list[str]:
        """Readable schedules of every timer of a group, one line each."""
        with self._lock:
            timers = list(self._timers.values())
        lines = []
        for timer in timers:
            if timer.grp_id != grp_id:
                continue
            info = timer.timer_info
            text = info[info.index("]") + 1 :] + "\n"
            text = text.replace("-1", "每")
            text = text.replace("月0日0周", "月周天")
            text = text.replace("月0日", "月")
            text = text.replace("日0周", "日")
            lines.append(text)
        return lines

    def get_timer(self, key: int) -> Timer | None:
        with self._lock:
            return self._timers.get(key)

    def add_timer_into_db(self, t: Timer) -> None:
        with self._lock:
            self._store.insert(t)

    def add_timer_into_map(self, t: Timer) -> None:
        with self._lock:
            self._timers[t.id] = t

    def close(self) -> None:
        """Stop every running timer."""
        with self._lock:
            for stop in self._jobs.values():
                stop.set()
            self._jobs.clear()
            threads = list(self._threads)
            self._threads.clear()
        for thread in threads:
            thread.join(timeout=1.0)

    def __enter__(self) -> Clock:
        return self

    def __exit__(self, *exc) -> None:
        self.close()