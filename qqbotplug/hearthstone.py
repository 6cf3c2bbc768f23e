"""Hearthstone card search and deck images from hs.fbigame.com."""

from __future__ import annotations

import json

import requests

SITE = "https://hs.fbigame.com"
USER_AGENT = (
    "Mozilla/5.0 (Linux; Android 6.0; Nexus 5 Build/MRA58N) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/86.0.4240.198 Mobile Safari/537.36"
)
AJAX = "https://hs.fbigame.com/ajax.php?"
PARAMS = (
    "mod=get_cards_list&"
    "mode=-1&"
    "extend=-1&"
    "mutil_extend=&"
    "hero=-1&"
    "rarity=-1&"
    "cost=-1&"
    "mutil_cost=&"
    "techlevel=-1&"
    "type=-1&"
    "collectible=-1&"
    "isbacon=-1&"
    "page=1&"
    "search_type=1&"
    "deckmode=normal"
)
CARD_IMAGE = "https://res.fbigame.com/hs/v13/{card_id}.png?auth_key={auth_key}"
_HASH_MARK = 'var hash = "'


def extract_hash(page: str) -> str:
    """The request hash embedded in the site's front page."""
    _, found, rest = page.partition(_HASH_MARK)
    if not found:
        raise ValueError("hash not found in page")
    return rest.split('"', 1)[0]


def search_url(page_hash: str, query: str) -> str:
    return f"{AJAX}{PARAMS}&hash={page_hash}&search={query}"


def deck_url(page_hash: str, code: str) -> str:
    return (
        f"{AJAX}{PARAMS}mod=general_deck_image&deck_code={code}"
        f"&deck_text=&hash={page_hash}&search={code}"
    )


def card_image_url(card_id: str, auth_key: str) -> str:
    return CARD_IMAGE.format(card_id=card_id, auth_key=auth_key)


def _get(url: str) -> bytes:
    response = requests.get(
        url, headers={"Referer": SITE, "User-Agent": USER_AGENT}, timeout=30
    )
    response.raise_for_status()
    return response.content


def _page_hash() -> str:
    return extract_hash(_get(SITE).decode("utf-8", errors="replace"))


def search_cards(query: str) -> list[dict]:
    """Cards matching ``query``, each with at least ``CardID`` and ``auth_key``."""
    data = json.loads(_get(search_url(_page_hash(), query)))
    cards = data.get("list") if isinstance(data, dict) else None
    return cards if isinstance(cards, list) else []


def deck_image(code: str) -> str:
    """Image of a deck code as a ``base64://`` URI."""
    data = json.loads(_get(deck_url(_page_hash(), code)))
    img = data.get("img", "") if isinstance(data, dict) else ""
    return "base64://" + (img if isinstance(img, str) else "")