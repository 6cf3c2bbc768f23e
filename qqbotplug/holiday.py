"""Countdowns to holidays and the daily slacking reminder."""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Iterable

HOLIDAY_NAMES = ("元旦", "春节", "清明节", "劳动节", "端午节", "中秋节", "国庆节")

_GREETING = (
    "上午好，摸鱼人！\n工作再累，一定不要忘记摸鱼哦！有事没事起身去茶水间，去厕所，"
    "去廊道走走别老在工位上坐着，钱是老板的,但命是自己的。\n"
)
_CLOSING = "上班是帮老板赚钱，摸鱼是赚老板的钱！最后，祝愿天下所有摸鱼人，都能愉快的渡过每一天…"

_SCAN_RE = re.compile(
    r"\s*([+-]?\d+)(?:_([+-]?\d+)(?:_([+-]?\d+)(?:_([+-]?\d+))?)?)?"
)


def _local_date(year: int, month: int, day: int) -> datetime:
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    try:
        return datetime(year, month, 1) + timedelta(days=day - 1)
    except (ValueError, OverflowError):
        return datetime.min


class Holiday:
    """A named holiday starting on a date and lasting ``dur`` days."""

    def __init__(self, name: str, dur: int, year: int, month: int, day: int) -> None:
        self.name = name
        self.date = _local_date(year, month, day)
        self.dur = timedelta(days=dur)

    def describe(self, now: datetime | None = None) -> str:
        """Countdown text relative to ``now``."""
        if now is None:
            now = datetime.now()
        d = self.date - now
        if d >= timedelta(0):
            days = d.total_seconds() / 86400.0
            return f"距离{self.name}还有: {days:.2f}天！"
        if d + self.dur >= timedelta(0):
            return f"好好享受 {self.name} 假期吧!"
        return f"今年 {self.name} 假期已过"

    def __str__(self) -> str:
        return self.describe()


def parse_holiday(name: str, raw: str) -> Holiday:
    """Build a holiday from a ``dur_year_month_day`` record; missing parts read as 0."""
    match = _SCAN_RE.match(raw)
    values = [int(v) if v else 0 for v in match.groups()] if match else [0, 0, 0, 0]
    dur, year, month, day = values
    return Holiday(name, dur, year, month, day)


def format_holiday(name: str, dur: int, year: int, month: int, day: int) -> tuple[str, str]:
    """Registry key and value under which a holiday is stored."""
    return f"holiday/{name}", f"{dur}_{year}_{month}_{day}"


def weekend(now: datetime | None = None) -> str:
    """Countdown to the weekend."""
    if now is None:
        now = datetime.now()
    weekday = (now.weekday() + 1) % 7
    if weekday in (0, 6):
        return "好好享受周末吧！"
    return f"距离周末还有:{5 - weekday}天！"


def moyu_message(holidays: Iterable[Holiday], now: datetime | None = None) -> str:
    """The full daily reminder text."""
    if now is None:
        now = datetime.now()
    parts = [now.strftime("%Y-%m-%d"), _GREETING, weekend(now)]
    for holiday in holidays:
        parts.append("\n")
        parts.append(holiday.describe(now))
    parts.append("\n")
    parts.append(_CLOSING)
    return "".join(parts)