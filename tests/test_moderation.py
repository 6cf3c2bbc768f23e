import random

import pytest

from qqbotplug.moderation import (
    GIST_CLEAR,
    GIST_SET,
    MAX_BAN_MINUTES,
    VERIFY_CLEAR,
    VERIFY_SET,
    ban_minutes,
    check_answer,
    make_quiz,
    pick_lucky_member,
    render_welcome,
    toggle_flag,
    unescape_cq,
)


def test_ban_units_agree():
    assert ban_minutes(2, "小时") == ban_minutes(120, "分钟")
    assert ban_minutes(1, "d") == ban_minutes(1, "天") == ban_minutes(24, "h")
    assert ban_minutes("7", "mins") == 7


def test_ban_unknown_unit_counts_minutes():
    assert ban_minutes(5, "foo") == 5
    assert ban_minutes("x", "分钟") == 0


def test_ban_capped():
    assert ban_minutes(100, "天") == 43199
    assert ban_minutes(MAX_BAN_MINUTES, "分钟") == MAX_BAN_MINUTES


def test_unescape_roundtrip():
    original = "[CQ:image,file=abc] hi [x]"
    escaped = original.replace("[", "&#91;").replace("]", "&#93;")
    assert unescape_cq(escaped) == original
    assert unescape_cq("plain") == "plain"


def test_render_welcome():
    text = render_welcome("{at} hi {nickname} of {groupname} ({gid}) {uid}", 123, "Bob", 456, "Club")
    assert "[CQ:at,qq=123]" in text
    assert text.endswith(" hi Bob of Club (456) 123")
    assert "{" not in render_welcome("{avatar}", 1, "n", 2, "g")
    assert "nk=1" in render_welcome("{avatar}", 1, "n", 2, "g")


def test_pick_lucky_member_recent_only():
    members = [{"user_id": i, "last_sent_time": i} for i in range(15)]
    for seed in range(30):
        chosen = pick_lucky_member(members, random.Random(seed))
        assert chosen["last_sent_time"] >= 5
        assert chosen in members


def test_pick_lucky_member_empty():
    with pytest.raises(IndexError):
        pick_lucky_member([], random.Random(0))


def test_toggle_verify_flag():
    on = toggle_flag(0, "开启", VERIFY_SET, VERIFY_CLEAR)
    assert on & VERIFY_SET == VERIFY_SET
    assert toggle_flag(on, "关闭", VERIFY_SET, VERIFY_CLEAR) & VERIFY_SET == 0
    assert toggle_flag(on, "随便", VERIFY_SET, VERIFY_CLEAR) is None


def test_toggle_gist_flag():
    on = toggle_flag(0, "启用", GIST_SET, GIST_CLEAR)
    assert on & GIST_SET == GIST_SET
    assert toggle_flag(on, "禁用", GIST_SET, GIST_CLEAR) == on & GIST_CLEAR


def test_make_quiz():
    rng = random.Random(1)
    for _ in range(20):
        a, b, total = make_quiz(rng)
        assert 0 <= a < 100 and 0 <= b < 100
        assert a + b == total


def test_check_answer():
    assert check_answer(" 1 2 ", 12) is True
    assert check_answer("13", 12) is False
    assert check_answer("abc", 12) is None