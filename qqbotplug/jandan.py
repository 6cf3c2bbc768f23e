"""Collection of "boring pictures" from jandan.net kept in SQLite."""

from __future__ import annotations

import random
import re
import sqlite3
import threading
from typing import Callable

import lxml.html

API = "http://jandan.net/pic"

_ISO_POLY = 0xD800000000000000
_MASK64 = 0xFFFFFFFFFFFFFFFF
_DIGITS_RE = re.compile(r"\d+")

_PAGE_XPATH = "//*[@id='comments']/div[2]/div/span[@class='current-comment-page']/text()"
_LINK_XPATH = "//*[@class='view_img_link']"
_PREVIOUS_XPATH = (
    "//*[@id='comments']/div[@class='comments']/div[@class='cp-pagenavi']"
    "/a[@class='previous-comment-page']"
)


def _make_table() -> list[int]:
    table = []
    for i in range(256):
        crc = i
        for _ in range(8):
            crc = (crc >> 1) ^ _ISO_POLY if crc & 1 else crc >> 1
        table.append(crc)
    return table


_TABLE = _make_table()


def picture_id(url: str) -> int:
    """CRC-64 (ISO polynomial) of the picture URL."""
    crc = _MASK64
    for b in url.encode("utf-8"):
        crc = _TABLE[(crc ^ b) & 0xFF] ^ (crc >> 8)
    return crc ^ _MASK64


def _to_signed(value: int) -> int:
    return value - (1 << 64) if value >= 1 << 63 else value


class PictureStore:
    """SQLite table of picture URLs keyed by their CRC-64."""

    def __init__(self, path) -> None:
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.RLock()
        with self._lock, self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS picture (id INTEGER PRIMARY KEY, url TEXT NOT NULL)"
            )

    def contains(self, pid: int) -> bool:
        with self._lock:
            row = self._conn.execute(
                "SELECT 1 FROM picture WHERE id = ?", (_to_signed(pid),)
            ).fetchone()
        return row is not None

    def add(self, url: str) -> int:
        """Store ``url`` and return its id."""
        pid = picture_id(url)
        with self._lock, self._conn:
            self._conn.execute(
                "REPLACE INTO picture (id, url) VALUES (?, ?)", (_to_signed(pid), url)
            )
        return pid

    def random(self, rng: random.Random | None = None) -> str:
        """A random stored URL; LookupError when the store is empty."""
        with self._lock:
            rows = self._conn.execute("SELECT url FROM picture ORDER BY rowid").fetchall()
        if not rows:
            raise LookupError("no pictures")
        return (rng or random.Random()).choice(rows)[0]

    def count(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM picture").fetchone()[0]

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> PictureStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def _parse(html: str):
    return lxml.html.document_fromstring(html)


def parse_page_total(html: str) -> int:
    """Number of the current (newest) page shown on the listing."""
    texts = _parse(html).xpath(_PAGE_XPATH)
    if not texts:
        raise ValueError("page number not found")
    match = _DIGITS_RE.search(str(texts[0]))
    if match is None:
        raise ValueError(f"invalid page number: {texts[0]!r}")
    return int(match.group())


def parse_picture_links(html: str) -> list[str]:
    """Absolute URLs of the pictures on a listing page."""
    links = []
    for element in _parse(html).xpath(_LINK_XPATH):
        values = list(element.attrib.values())
        if values:
            links.append("https:" + values[0])
    return links


def parse_previous_page(html: str) -> str:
    """URL of the next older listing page."""
    anchors = _parse(html).xpath(_PREVIOUS_XPATH)
    if not anchors:
        raise ValueError("previous page link not found")
    values = list(anchors[0].attrib.values())
    if len(values) < 2:
        raise ValueError("previous page link has no target")
    return "https:" + values[1]


def update(store: PictureStore, fetch: Callable[[str], str]) -> int:
    """Walk back through the listing, storing new pictures until a known one.

    ``fetch`` returns the HTML of a URL. Returns the number of pictures added.
    """
    url = API
    page_total = parse_page_total(fetch(url))
    added = 0
    for i in range(page_total):
        html = fetch(url)
        for link in parse_picture_links(html):
            if store.contains(picture_id(link)):
                return added
            store.add(link)
            added += 1
        if i != page_total - 1:
            url = parse_previous_page(html)
    return added