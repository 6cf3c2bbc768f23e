import json
from unittest import mock

import pytest

from qqbotplug.hearthstone import (
    card_image_url,
    deck_image,
    deck_url,
    extract_hash,
    search_cards,
    search_url,
)

FRONT = '<script>var hash = "abc123"; var x = 1;</script>'


def _response(body):
    r = mock.Mock()
    r.content = body.encode("utf-8") if isinstance(body, str) else body
    r.status_code = 200
    r.raise_for_status.return_value = None
    return r


def test_extract_hash():
    assert extract_hash(FRONT) == "abc123"


def test_extract_hash_missing():
    with pytest.raises(ValueError):
        extract_hash("<html></html>")


def test_search_url():
    url = search_url("h", "q")
    assert url.startswith("https://hs.fbigame.com/ajax.php?mod=get_cards_list&")
    assert url.endswith("deckmode=normal&hash=h&search=q")


def test_deck_url():
    url = deck_url("h", "AAE")
    assert url.endswith(
        "deckmode=normalmod=general_deck_image&deck_code=AAE&deck_text=&hash=h&search=AAE"
    )


def test_card_image_url():
    assert card_image_url("EX1_001", "k") == "https://res.fbigame.com/hs/v13/EX1_001.png?auth_key=k"


@mock.patch("requests.get")
def test_search_cards(get):
    cards = [{"CardID": "C1", "auth_key": "k1"}, {"CardID": "C2", "auth_key": "k2"}]
    get.side_effect = [_response(FRONT), _response(json.dumps({"list": cards}))]
    assert search_cards("fire") == cards
    assert get.call_args_list[1].args[0] == search_url("abc123", "fire")


@mock.patch("requests.get")
def test_search_cards_empty(get):
    get.side_effect = [_response(FRONT), _response("{}")]
    assert search_cards("none") == []


@mock.patch("requests.get")
def test_deck_image(get):
    get.side_effect = [_response(FRONT), _response(json.dumps({"img": "XYZ"}))]
    assert deck_image("AAECode") == "base64://XYZ"
    assert get.call_args_list[1].args[0] == deck_url("abc123", "AAECode")