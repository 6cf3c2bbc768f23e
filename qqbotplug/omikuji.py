"""Senso-ji fortune slips: slip pictures and their stored interpretations."""

from __future__ import annotations

import sqlite3
import threading

BED = "https://gitcode.net/u011570312/senso-ji-omikuji/-/raw/main/{n}_{side}.jpg"
KUJI_COUNT = 100


def omikuji_images(n: int) -> tuple[str, str]:
    """Front and back pictures of fortune slip ``n`` (1..100)."""
    if not 1 <= n <= KUJI_COUNT:
        raise ValueError(f"no such slip: {n}")
    return BED.format(n=n, side=0), BED.format(n=n, side=1)


class KujiStore:
    """SQLite table of slip interpretations keyed by slip number."""

    def __init__(self, path) -> None:
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.Lock()
        with self._lock, self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS kuji (id INTEGER PRIMARY KEY, text TEXT NOT NULL)"
            )

    def add(self, kid: int, text: str) -> None:
        """Store the interpretation of slip ``kid``, replacing any previous one."""
        with self._lock, self._conn:
            self._conn.execute("REPLACE INTO kuji (id, text) VALUES (?, ?)", (kid, text))

    def get(self, kid: int) -> str:
        """Interpretation of slip ``kid``; LookupError if it is not stored."""
        with self._lock:
            row = self._conn.execute("SELECT text FROM kuji WHERE id = ?", (kid,)).fetchone()
        if row is None:
            raise LookupError(f"no kuji with id {kid}")
        return row[0]

    def count(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM kuji").fetchone()[0]

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> KujiStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()