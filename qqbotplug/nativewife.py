"""Per-group folders of "wife" pictures and the daily draw."""

from __future__ import annotations

import hashlib
import os
import random
from datetime import date
from pathlib import Path
from typing import Sequence

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def clean_name(text: str, command: str) -> str:
    """The picture name given after ``command`` in ``text``.

    Spaces and path separators are removed. Raises ValueError when no name
    remains.
    """
    name = text.replace(" ", "")
    at = name.rfind(command)
    if at < 0:
        raise ValueError("没有找到wife的名字！")
    name = name[at + len(command) :].replace("/", "").replace("\\", "")
    if not name:
        raise ValueError("没有找到wife的名字！")
    return name


def pick_wife(name: str, today: date, wives: Sequence[str]) -> str:
    """The wife of ``name`` on ``today``; the same for the whole day."""
    if not wives:
        raise LookupError("一个wife也没有哦~")
    if len(wives) == 1:
        return wives[0]
    digest = hashlib.md5(
        f"{name}{today.year}{today.month}{today.day}".encode("utf-8")
    ).digest()
    seed = int.from_bytes(digest[:8], "little", signed=True)
    return wives[random.Random(seed).randrange(len(wives))]


def _wives(folder) -> list[str]:
    try:
        return sorted(entry.name for entry in os.scandir(folder))
    except OSError as err:
        raise LookupError("一个wife也没有哦~") from err


def draw_wife(folder, name: str, today: date | None = None) -> str:
    """File name of the wife drawn for ``name`` from a group folder."""
    return pick_wife(name, today or date.today(), _wives(folder))


def add_wife(folder, name: str, data: bytes) -> Path:
    """Save a picture under ``name``, creating the group folder if needed."""
    folder = Path(folder)
    if not folder.exists():
        folder.mkdir()
    target = folder / name
    target.write_bytes(data)
    return target


def remove_wife(folder, name: str) -> None:
    """Delete a picture; FileNotFoundError if it does not exist."""
    (Path(folder) / name).unlink()


def group_folder(base, group_id: int) -> Path:
    """Folder of a group, named by its number in base 36."""
    n = abs(group_id)
    digits = ""
    while True:
        n, rem = divmod(n, 36)
        digits = _BASE36[rem] + digits
        if n == 0:
            break
    if group_id < 0:
        digits = "-" + digits
    return Path(base) / digits