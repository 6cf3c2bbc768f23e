"""The Ogura Hyakunin Isshu anthology of one hundred poems."""

from __future__ import annotations

import csv
import re
from dataclasses import dataclass

BED = "https://gitcode.net/u011570312/OguraHyakuninIsshu/-/raw/master/"
CSV_URL = BED + "小倉百人一首.csv"
POEM_COUNT = 100

_LABELS = (
    ("●", "番号"),
    ("◉", "歌人"),
    ("○", "上の句"),
    ("○", "下の句"),
    ("◎", "上の句ひらがな"),
    ("◎", "下の句ひらがな"),
)
_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Poem:
    """One poem with its number, poet and both halves in kanji and kana."""

    number: str
    poet: str
    kami: str
    shimo: str
    kami_kana: str
    shimo_kana: str

    def __str__(self) -> str:
        values = (
            self.number,
            self.poet,
            self.kami,
            self.shimo,
            self.kami_kana,
            self.shimo_kana,
        )
        return "".join(
            f"{mark}{label}：{value}\n" for (mark, label), value in zip(_LABELS, values)
        )


def load_poems(path) -> list[Poem]:
    """Read the anthology CSV: a title row then 100 numbered rows of six fields."""
    with open(path, encoding="utf-8", newline="") as handle:
        records = list(csv.reader(handle))[1:]
    if len(records) != POEM_COUNT:
        raise ValueError("invalid csvfile")
    poems = []
    for expected, row in enumerate(records, start=1):
        if len(row) != 6:
            raise ValueError("invalid csvfile")
        if not _INT_RE.fullmatch(row[0]):
            raise ValueError(f"invalid poem number {row[0]!r}")
        if int(row[0]) != expected:
            raise ValueError("invalid csvfile")
        poems.append(Poem(*row))
    return poems


def image_urls(n: int) -> tuple[str, str]:
    """Card picture and calligraphy picture of poem ``n`` (1..100)."""
    if not 1 <= n <= POEM_COUNT:
        raise ValueError("超出范围")
    return f"{BED}img/{n:03d}.jpg", f"{BED}img/{n:03d}.png"