"""Pure helpers behind the group management commands."""

from __future__ import annotations

import random
import re
from typing import Sequence

HELP = (
    "====群管====\n"
    "- 禁言@QQ 1分钟\n"
    "- 解除禁言 @QQ\n"
    "- 我要自闭 1分钟\n"
    "- 开启全员禁言\n"
    "- 解除全员禁言\n"
    "- 升为管理@QQ\n"
    "- 取消管理@QQ\n"
    "- 修改名片@QQ XXX\n"
    "- 修改头衔@QQ XXX\n"
    "- 申请头衔 XXX\n"
    "- 踢出群聊@QQ\n"
    "- 退出群聊 1234@bot\n"
    "- 群聊转发 1234 XXX\n"
    "- 私聊转发 0000 XXX\n"
    "- 在MM月dd日的hh点mm分时(用http://url)提醒大家XXX\n"
    "- 在MM月[每周 | 周几]的hh点mm分时(用http://url)提醒大家XXX\n"
    "- 取消在MM月dd日的hh点mm分的提醒\n"
    "- 取消在MM月[每周 | 周几]的hh点mm分的提醒\n"
    "- 在\"cron\"时(用[url])提醒大家[xxx]\n"
    "- 取消在\"cron\"的提醒\n"
    "- 列出所有提醒\n"
    "- 翻牌\n"
    "- 设置欢迎语XXX 可选添加 [{at}] [{nickname}] [{avatar}] [{uid}] [{gid}] [{groupname}] "
    "{at}可在发送时艾特被欢迎者 {nickname}是被欢迎者名字 {avatar}是被欢迎者头像 "
    "{uid}是被欢迎者QQ号 {gid}是当前群群号 {groupname} 是当前群群名\n"
    "- 测试欢迎语\n"
    "- 设置告别辞 参数同设置欢迎语\n"
    "- 测试告别辞\n"
    "- [开启 | 关闭]入群验证"
)

MAX_BAN_MINUTES = 43199

VERIFY_SET = 0x1
VERIFY_CLEAR = 0x7FFFFFFF_FFFFFFFE
GIST_SET = 0x10
GIST_CLEAR = 0x7FFFFFFF_FFFFFFFD

_ENABLE = frozenset(("开启", "打开", "启用"))
_DISABLE = frozenset(("关闭", "关掉", "禁用"))

_UNIT_FACTORS = {
    "分钟": 1, "min": 1, "mins": 1, "m": 1,
    "小时": 60, "hour": 60, "hours": 60, "h": 60,
    "天": 60 * 24, "day": 60 * 24, "days": 60 * 24, "d": 60 * 24,
}

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _to_int(text: str) -> int:
    text = text.strip()
    return int(text) if _INT_RE.fullmatch(text) else 0


def ban_minutes(amount, unit: str) -> int:
    """Length of a ban in minutes, capped just below one month.

    Unknown units count as minutes; an unparsable amount counts as 0.
    """
    if isinstance(amount, str):
        amount = _to_int(amount)
    minutes = amount * _UNIT_FACTORS.get(unit, 1)
    return MAX_BAN_MINUTES if minutes >= MAX_BAN_MINUTES + 1 else minutes


def unescape_cq(content: str) -> str:
    """Turn escaped brackets back into CQ code brackets."""
    return content.replace("&#91;", "[").replace("&#93;", "]")


def render_welcome(
    template: str, user_id: int, nickname: str, group_id: int, group_name: str
) -> str:
    """Fill the placeholders of a welcome or farewell template with CQ codes."""
    uid = str(user_id)
    at = f"[CQ:at,qq={uid}]"
    avatar = f"[CQ:image,file=http://q4.qlogo.cn/g?b=qq&nk={uid}&s=640]"
    text = template.replace("{at}", at)
    text = text.replace("{nickname}", nickname)
    text = text.replace("{avatar}", avatar)
    text = text.replace("{uid}", uid)
    text = text.replace("{gid}", str(group_id))
    text = text.replace("{groupname}", group_name)
    return text


def pick_lucky_member(members: Sequence[dict], rng: random.Random | None = None) -> dict:
    """Pick one of the ten most recently active members at random."""
    rng = rng or random.Random()
    ordered = sorted(members, key=lambda m: int(m.get("last_sent_time", 0)))
    return rng.choice(ordered[-10:])


def toggle_flag(data: int, option: str, set_mask: int, clear_mask: int) -> int | None:
    """Apply an on/off option word to a flag word; None for an unknown word."""
    if option in _ENABLE:
        return data | set_mask
    if option in _DISABLE:
        return data & clear_mask
    return None


def make_quiz(rng: random.Random | None = None) -> tuple[int, int, int]:
    """Two addends below 100 and their sum for the join verification."""
    rng = rng or random.Random()
    a = rng.randrange(100)
    b = rng.randrange(100)
    return a, b, a + b


def check_answer(text: str, expected: int) -> bool | None:
    """Whether ``text`` (spaces ignored) answers the quiz; None if it is no number."""
    cleaned = text.replace(" ", "")
    if not _INT_RE.fullmatch(cleaned):
        return None
    return int(cleaned) == expected