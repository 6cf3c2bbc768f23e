"""Storage of group greetings and members, and gist-based join verification."""

from __future__ import annotations

import hashlib
import re
import sqlite3
import threading
import time
from typing import Callable

import requests

GIST_RAW = "https://gist.githubusercontent.com/{user}/{gist_hash}/raw/{name}"
ANSWER_MARKER = "答案："
MAX_SKEW_SECONDS = 600

_INT_RE = re.compile(r"[+-]?[0-9]+")

Fetch = Callable[[str], "bytes | str"]


class MemberStore:
    """SQLite tables of welcome and farewell texts and verified members."""

    def __init__(self, path) -> None:
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.Lock()
        with self._lock, self._conn:
            for table in ("welcome", "farewell"):
                self._conn.execute(
                    f"CREATE TABLE IF NOT EXISTS {table} "
                    "(gid INTEGER PRIMARY KEY, msg TEXT NOT NULL)"
                )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS member "
                "(qq INTEGER PRIMARY KEY, ghun TEXT NOT NULL)"
            )

    def _set(self, table: str, gid: int, msg: str) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                f"REPLACE INTO {table} (gid, msg) VALUES (?, ?)", (gid, msg)
            )

    def _get(self, table: str, gid: int) -> str | None:
        with self._lock:
            row = self._conn.execute(
                f"SELECT msg FROM {table} WHERE gid = ?", (gid,)
            ).fetchone()
        return row[0] if row else None

    def set_welcome(self, gid: int, msg: str) -> None:
        """Store the welcome template of a group, replacing any previous one."""
        self._set("welcome", gid, msg)

    def welcome(self, gid: int) -> str | None:
        """The welcome template of a group, or None if none is set."""
        return self._get("welcome", gid)

    def set_farewell(self, gid: int, msg: str) -> None:
        """Store the farewell template of a group, replacing any previous one."""
        self._set("farewell", gid, msg)

    def farewell(self, gid: int) -> str | None:
        """The farewell template of a group, or None if none is set."""
        return self._get("farewell", gid)

    def has_member(self, ghun: str) -> bool:
        """Whether a GitHub user name has already been used to join."""
        with self._lock:
            row = self._conn.execute(
                "SELECT 1 FROM member WHERE ghun = ? LIMIT 1", (ghun,)
            ).fetchone()
        return row is not None

    def add_member(self, qq: int, ghun: str) -> None:
        """Record that ``qq`` joined as GitHub user ``ghun``."""
        with self._lock, self._conn:
            self._conn.execute(
                "REPLACE INTO member (qq, ghun) VALUES (?, ?)", (qq, ghun)
            )

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> MemberStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def gist_url(user: str, gist_hash: str, group_id: int) -> str:
    """Raw URL of the gist file named after the MD5 of the group number."""
    name = hashlib.md5(str(group_id).encode("utf-8")).hexdigest()
    return GIST_RAW.format(user=user, gist_hash=gist_hash, name=name)


def parse_gist_answer(comment: str) -> tuple[str, str]:
    """Split the ``username/gisthash`` answer out of a join request comment.

    Raises ValueError when the answer has no user name before a slash.
    """
    raw = comment.encode("utf-8")
    marker = ANSWER_MARKER.encode("utf-8")
    start = raw.find(marker) + len(marker)
    answer = raw[start:].decode("utf-8", errors="replace")
    divider = answer.find("/")
    if divider <= 0:
        raise ValueError("格式错误!")
    return answer[:divider], answer[divider + 1 :]


def _default_fetch(url: str) -> bytes:
    response = requests.get(url, timeout=30)
    response.raise_for_status()
    return response.content


def check_new_user(
    store: MemberStore,
    qq: int,
    gid: int,
    ghun: str,
    gist_hash: str,
    fetch: Fetch | None = None,
    now: float | None = None,
) -> tuple[bool, str]:
    """Verify a join request against the applicant's gist.

    The gist must hold a unix timestamp within ten minutes of ``now``. On
    success the member is recorded and ``(True, "")`` is returned; otherwise
    ``(False, reason)``.
    """
    if store.has_member(ghun):
        return False, "该github用户已入群"
    fetch = fetch or _default_fetch
    if now is None:
        now = time.time()
    url = gist_url(ghun, gist_hash, gid)
    try:
        data = fetch(url)
    except (requests.RequestException, OSError, ValueError) as err:
        return False, f"无法连接到gist: {err}"
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    if not _INT_RE.fullmatch(text):
        return False, "时间戳格式错误: " + text
    stamp = int(text)
    if abs(int(now) - stamp) < MAX_SKEW_SECONDS:
        store.add_member(qq, ghun)
        return True, ""
    return False, "时间戳超时"