"""Guesses for what a pinyin-initial abbreviation stands for."""

from __future__ import annotations

import json

import requests

API = "https://lab.magiconch.com/api/nbnhhsh/guess"


def _as_text(value) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    return json.dumps(value, ensure_ascii=False)


def extract_guesses(data) -> list[str]:
    """Pull the translations, or failing those the partial inputs, from a reply."""
    if isinstance(data, (bytes, str)):
        data = json.loads(data)
    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        return []
    first = data[0]
    values = first["trans"] if "trans" in first else first.get("inputting")
    if not isinstance(values, list):
        return []
    return [_as_text(v) for v in values]


def guess(text: str) -> list[str]:
    """Ask the guessing service what ``text`` may stand for."""
    response = requests.post(API, data={"text": text}, timeout=30)
    return extract_guesses(response.content)