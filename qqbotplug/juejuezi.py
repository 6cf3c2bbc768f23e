"""The "绝绝子" phrase generator."""

from __future__ import annotations

import json
import re

import requests

API = "https://www.offjuan.com/api/juejuezi/text"
REFERER = "https://juejuezi.offjuan.com/"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36"
)
KEYWORD = "绝绝子"
TRIGGER = re.compile("[\u4E00-\u9FA5]{0,10}绝绝子[\u4E00-\u9FA5]{0,10}")


def build_payload(verb: str, noun: str) -> str:
    """Request body naming the verb and the noun."""
    return f'{{"verb":"{verb}","noun":"{noun}"}}'


def juejuezi(verb: str, noun: str) -> str:
    """Ask the generator for a phrase; an unreadable reply gives an empty string."""
    response = requests.post(
        API,
        data=build_payload(verb, noun).encode("utf-8"),
        headers={"Referer": REFERER, "User-Agent": USER_AGENT},
        timeout=30,
    )
    try:
        data = json.loads(response.content)
    except ValueError:
        return ""
    text = data.get("text") if isinstance(data, dict) else None
    if text is None:
        return ""
    return text if isinstance(text, str) else json.dumps(text, ensure_ascii=False)


def split_request(text: str) -> tuple[str, str] | None:
    """Verb and noun of a two-character request.

    Returns None when the remaining text is longer and must first be split
    into words; raises ValueError when fewer than two characters remain.
    """
    rest = text.replace(KEYWORD, "")
    if len(rest) < 2:
        raise ValueError("不要只输入绝绝子")
    if len(rest) == 2:
        return rest[0], rest[1]
    return None