"""Local picture folders indexed by difference hash in SQLite."""

from __future__ import annotations

import os
import random
import sqlite3
import threading
from collections import namedtuple
from pathlib import Path

from PIL import Image

IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".gif", ".webp")
SUMMARY_TITLE = "所有本地setu分类"

_Image = namedtuple("_Image", "img_id name path")


def difference_hash(image: Image.Image) -> int:
    """64-bit difference hash of an image as a signed integer.

    The image is scaled to 9x8 grey pixels; each bit tells whether a pixel is
    darker than its right neighbour, the first comparison being the top bit.
    """
    grey = image.convert("RGB").resize((9, 8), Image.BILINEAR).convert("L")
    pixels = list(grey.getdata())
    value = 0
    for y in range(8):
        row = pixels[y * 9 : (y + 1) * 9]
        for left, right in zip(row, row[1:]):
            value = (value << 1) | (1 if left < right else 0)
    return value - (1 << 64) if value >= 1 << 63 else value


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class SetuStore:
    """One table per picture folder, holding hash, file name and relative path."""

    def __init__(self, path) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(str(self.path), check_same_thread=False)

    def classes(self) -> list[str]:
        """Names of all indexed folders, sorted."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
            ).fetchall()
        return [r[0] for r in rows]

    def _create(self, clsn: str) -> None:
        self._conn.execute(
            f"CREATE TABLE IF NOT EXISTS {_quote(clsn)} "
            "(imgid INTEGER PRIMARY KEY, name TEXT NOT NULL, path TEXT NOT NULL)"
        )

    def scan_all(self, root) -> None:
        """Rebuild the index from every folder below ``root``."""
        root = Path(root)
        with self._lock:
            self._conn.close()
            self.path.unlink(missing_ok=True)
            self._conn = sqlite3.connect(str(self.path), check_same_thread=False)
        for dirpath, dirnames, _ in os.walk(root):
            dirnames.sort()
            current = Path(dirpath)
            if current == root:
                continue
            rel = current.relative_to(root).as_posix()
            clsn = current.name
            with self._lock, self._conn:
                self._create(clsn)
            self.scan_class(root, rel, clsn)

    def scan_class(self, root, path: str, clsn: str) -> None:
        """Re-index the pictures directly inside ``root/path`` as class ``clsn``."""
        folder = Path(root) / path
        entries = sorted(os.scandir(folder), key=lambda e: e.name)
        with self._lock, self._conn:
            self._conn.execute(f"DROP TABLE IF EXISTS {_quote(clsn)}")
            self._create(clsn)
        for entry in entries:
            if entry.is_dir() or not entry.name.lower().endswith(IMAGE_SUFFIXES):
                continue
            relpath = f"{path}/{entry.name}"
            with Image.open(entry.path) as img:
                img.load()
                dhash = difference_hash(img)
            with self._lock, self._conn:
                self._conn.execute(
                    f"REPLACE INTO {_quote(clsn)} (imgid, name, path) VALUES (?, ?, ?)",
                    (dhash, entry.name, relpath),
                )

    def _require(self, clsn: str) -> None:
        if clsn not in self.classes():
            raise LookupError(f"no such class: {clsn}")

    def pick(self, clsn: str, rng: random.Random | None = None) -> _Image:
        """A random picture of a class as ``(img_id, name, path)``."""
        self._require(clsn)
        with self._lock:
            rows = self._conn.execute(
                f"SELECT imgid, name, path FROM {_quote(clsn)} ORDER BY rowid"
            ).fetchall()
        if not rows:
            raise LookupError(f"class {clsn} is empty")
        return _Image(*(rng or random.Random()).choice(rows))

    def count(self, clsn: str) -> int:
        """Number of pictures in a class."""
        self._require(clsn)
        with self._lock:
            return self._conn.execute(f"SELECT COUNT(*) FROM {_quote(clsn)}").fetchone()[0]

    def summary(self) -> str:
        """Numbered list of classes with their picture counts."""
        lines = [SUMMARY_TITLE]
        for i, clsn in enumerate(self.classes()):
            try:
                lines.append(f"{i:02d}. {clsn}({self.count(clsn)})")
            except (LookupError, sqlite3.Error):
                lines.append(f"{i:02d}. {clsn}(error)")
        return "\n".join(lines)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> SetuStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()