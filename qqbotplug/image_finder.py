"""Keyword search of illustrations through the pixivel service."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Iterable
from urllib.parse import quote_plus

import requests

API = "https://api.pixivel.moe/v2/pixiv/illust/search/"
REFERER = "https://pixivel.moe/"
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/94.0.4606.61 Safari/537.36"
)
_HREF_RE = re.compile(r'<a href=".*">')


class SearchError(Exception):
    """The search service reported an error."""


@dataclass(frozen=True)
class Tag:
    name: str
    translation: str = ""


@dataclass(frozen=True)
class Illust:
    """One search hit."""

    id: int
    title: str = ""
    alt_title: str = ""
    description: str = ""
    width: int = 0
    height: int = 0
    sanity: int = 0
    page_count: int = 0
    image: str = ""
    tags: tuple = field(default_factory=tuple)


def print_tags(tags: Iterable[Tag]) -> str:
    """Tags as ``#name (translation)`` lines, each preceded by a newline."""
    parts = []
    for tag in tags:
        parts.append("\n#" + tag.name)
        if tag.translation:
            parts.append(f" ({tag.translation})")
    return "".join(parts)


def clean_description(text: str) -> str:
    """Strip the HTML line breaks and links from an illustration description."""
    text = text.replace("<br />", "\n").replace("</a>", "")
    return _HREF_RE.sub("", text)


def _int(value) -> int:
    return value if isinstance(value, int) and not isinstance(value, bool) else 0


def _str(value) -> str:
    return value if isinstance(value, str) else ""


def _illust(raw: dict) -> Illust:
    tags = tuple(
        Tag(_str(t.get("name")), _str(t.get("translation")))
        for t in raw.get("tags") or []
        if isinstance(t, dict)
    )
    return Illust(
        id=_int(raw.get("id")),
        title=_str(raw.get("title")),
        alt_title=_str(raw.get("altTitle")),
        description=_str(raw.get("description")),
        width=_int(raw.get("width")),
        height=_int(raw.get("height")),
        sanity=_int(raw.get("sanity")),
        page_count=_int(raw.get("pageCount")),
        image=_str(raw.get("image")),
        tags=tags,
    )


def parse_result(data) -> list[Illust]:
    """Illustrations of a search reply; SearchError if the reply is an error."""
    if isinstance(data, (bytes, str)):
        data = json.loads(data)
    if not isinstance(data, dict):
        raise SearchError("unexpected reply")
    if data.get("error"):
        raise SearchError(_str(data.get("message")))
    body = data.get("data") or {}
    return [_illust(r) for r in body.get("illusts") or [] if isinstance(r, dict)]


def describe_illust(illust: Illust) -> str:
    """Text summary of one illustration."""
    return (
        f"{illust.width}x{illust.height}\n"
        f"标题: {illust.title}\n"
        f"副标题: {illust.alt_title}\n"
        f"ID: {illust.id}\n"
        f"分级:{illust.sanity}\n"
        f"{clean_description(illust.description)}"
        f"{print_tags(illust.tags)}"
    )


def search(keyword: str) -> list[Illust]:
    """First page of illustrations found for ``keyword``."""
    response = requests.get(
        f"{API}{quote_plus(keyword)}?page=0",
        headers={"Referer": REFERER, "User-Agent": USER_AGENT},
        timeout=30,
    )
    response.raise_for_status()
    return parse_result(response.content)