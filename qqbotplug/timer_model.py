"""Group reminder timers: packed schedule fields and parsing of Chinese date words."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass

_EN_MASK = 0x800000
_MONTH_MASK = 0x780000
_DAY_MASK = 0x07C000
_WEEK_MASK = 0x003800
_HOUR_MASK = 0x0007C0
_MINUTE_MASK = 0x00003F

_DIGITS = "零一二三四五六七八九十"
_EVERY = "每"
_INT_RE = re.compile(r"[+-]?[0-9]+")


def _unpack(packed: int, mask: int, shift: int) -> int:
    value = (packed & mask) >> shift
    return -1 if value == mask >> shift else value


def _pack(packed: int, value: int, mask: int, shift: int) -> int:
    return ((value << shift) & mask) | (packed & (0xFFFFFF & ~mask))


@dataclass
class Timer:
    """A reminder for a group, either a cron expression or packed date fields.

    The ``packed`` field holds, from high to low bits: enabled (1), month (4),
    day (5), weekday (3), hour (5) and minute (6). All-ones in a field means
    "every" and reads back as -1.
    """

    id: int = 0
    packed: int = 0
    self_id: int = 0
    grp_id: int = 0
    alert: str = ""
    cron: str = ""
    url: str = ""

    @property
    def enabled(self) -> bool:
        return self.packed & _EN_MASK != 0

    @enabled.setter
    def enabled(self, value: bool) -> None:
        if value:
            self.packed |= _EN_MASK
        else:
            self.packed &= 0x7FFFFF

    @property
    def month(self) -> int:
        return _unpack(self.packed, _MONTH_MASK, 19)

    @month.setter
    def month(self, value: int) -> None:
        self.packed = _pack(self.packed, value, _MONTH_MASK, 19)

    @property
    def day(self) -> int:
        return _unpack(self.packed, _DAY_MASK, 14)

    @day.setter
    def day(self, value: int) -> None:
        self.packed = _pack(self.packed, value, _DAY_MASK, 14)

    @property
    def week(self) -> int:
        """Weekday with Sunday as 0."""
        return _unpack(self.packed, _WEEK_MASK, 11)

    @week.setter
    def week(self, value: int) -> None:
        self.packed = _pack(self.packed, value, _WEEK_MASK, 11)

    @property
    def hour(self) -> int:
        return _unpack(self.packed, _HOUR_MASK, 6)

    @hour.setter
    def hour(self, value: int) -> None:
        self.packed = _pack(self.packed, value, _HOUR_MASK, 6)

    @property
    def minute(self) -> int:
        return _unpack(self.packed, _MINUTE_MASK, 0)

    @minute.setter
    def minute(self, value: int) -> None:
        self.packed = _pack(self.packed, value, _MINUTE_MASK, 0)

    @property
    def timer_info(self) -> str:
        """Normalised description used as the identity of the timer."""
        if self.cron:
            return f"[{self.grp_id}]{self.cron}"
        return (
            f"[{self.grp_id}]{self.month}月{self.day}日{self.week}周"
            f"{self.hour}:{self.minute}"
        )

    @property
    def timer_id(self) -> int:
        """First four bytes of the MD5 of ``timer_info``, little endian."""
        digest = hashlib.md5(self.timer_info.encode("utf-8")).digest()
        return int.from_bytes(digest[:4], "little")


def filled_cron_timer(croncmd: str, alert: str, img: str, botqq: int, gid: int) -> Timer:
    """Build a timer driven by a cron expression."""
    return Timer(self_id=botqq, grp_id=gid, alert=alert, cron=croncmd, url=img)


def _merge_ten(text: str) -> str:
    # "二十三" -> "二三": drop the middle 十
    return text[0] + text[2]


def filled_timer(date_strs, botqq: int, grp: int, match_date_only: bool) -> Timer:
    """Build a timer from the groups of a reminder command match.

    ``date_strs`` holds the whole match followed by month, day-or-week, hour,
    minute and, unless ``match_date_only``, the optional "用url" part and the
    alert text. An invalid field leaves the timer disabled with ``alert``
    describing the problem.
    """
    month_str = date_strs[1]
    day_week_str = date_strs[2]
    hour_str = date_strs[3]
    minute_str = date_strs[4]

    t = Timer()
    mon = chinese_num_to_int(month_str)
    if (mon != -1 and mon <= 0) or mon > 12:
        t.alert = "月份非法！"
        return t
    t.month = mon

    if len(day_week_str) == 4:
        d = chinese_num_to_int(day_week_str[0] + day_week_str[2])
        if (d != -1 and d <= 0) or d > 31:
            t.alert = "日期非法1！"
            return t
        t.day = d
    elif day_week_str[-1] == "日":
        d = chinese_num_to_int(day_week_str[:-1])
        if (d != -1 and d <= 0) or d > 31:
            t.alert = "日期非法2！"
            return t
        t.day = d
    elif day_week_str[0] == _EVERY:
        t.week = -1
    else:
        w = chinese_num_to_int(day_week_str[1:])
        if w == 7:
            w = 0
        if w < 0 or w > 6:
            t.alert = "星期非法！"
            return t
        t.week = w

    if len(hour_str) == 3:
        hour_str = _merge_ten(hour_str)
    h = chinese_num_to_int(hour_str)
    if h < -1 or h > 23:
        t.alert = "小时非法！"
        return t
    t.hour = h

    if len(minute_str) == 3:
        minute_str = _merge_ten(minute_str)
    mn = chinese_num_to_int(minute_str)
    if mn < -1 or mn > 59:
        t.alert = "分钟非法！"
        return t
    t.minute = mn

    if not match_date_only:
        url_str = date_strs[5]
        if url_str:
            t.url = url_str[1:]
            if not t.url.startswith("http"):
                t.url = "illegal"
                return t
        t.alert = date_strs[6]
        t.enabled = True
    t.self_id = botqq
    t.grp_id = grp
    return t


def chinese_num_to_int(rs: str) -> int:
    """Convert a one- or two-figure number in Chinese or Arabic digits.

    "每" reads as -1, "每二" as -2 and so on. Unparsable digit strings give 0.
    """
    if not rs:
        raise ValueError("empty number")
    if rs[0].isdecimal():
        return int(rs) if _INT_RE.fullmatch(rs) else 0
    if rs[0] == _EVERY:
        return -chinese_char_to_int(rs[1]) if len(rs) == 2 else -1
    if len(rs) == 1:
        return chinese_char_to_int(rs[0])
    ten = chinese_char_to_int(rs[0])
    if ten != 10:
        ten *= 10
    ge = chinese_char_to_int(rs[1])
    if ge == 10:
        ge = 0
    return ten + ge


def chinese_char_to_int(c: str) -> int:
    """Map one Chinese numeral to 0..10; 日 and 天 (Sunday) map to 7, others to 0."""
    if c in ("日", "天"):
        return 7
    index = _DIGITS.find(c)
    return index if index >= 0 else 0