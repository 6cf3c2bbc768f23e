from datetime import date
from pathlib import Path

import pytest

from qqbotplug.nativewife import (
    add_wife,
    clean_name,
    draw_wife,
    group_folder,
    pick_wife,
    remove_wife,
)


def test_clean_name():
    assert clean_name("添加wife 小 明/\\", "添加wife") == "小明"
    assert clean_name("删除wife a/b", "删除wife") == "ab"


def test_clean_name_empty():
    with pytest.raises(ValueError):
        clean_name("添加wife  ", "添加wife")


def test_pick_wife_deterministic_per_day():
    wives = ["a", "b", "c", "d", "e"]
    today = date(2022, 6, 1)
    first = pick_wife("alice", today, wives)
    assert first in wives
    assert pick_wife("alice", today, wives) == first


def test_pick_wife_single_and_empty():
    assert pick_wife("alice", date(2022, 6, 1), ["only"]) == "only"
    with pytest.raises(LookupError):
        pick_wife("alice", date(2022, 6, 1), [])


def test_add_draw_remove(tmp_path):
    folder = group_folder(tmp_path, 123456)
    add_wife(folder, "one", b"x")
    add_wife(folder, "two", b"y")
    assert (folder / "two").read_bytes() == b"y"
    drawn = draw_wife(folder, "bob", date(2022, 1, 2))
    assert drawn in {"one", "two"}
    remove_wife(folder, "one")
    assert draw_wife(folder, "bob") == "two"
    with pytest.raises(FileNotFoundError):
        remove_wife(folder, "one")


def test_draw_missing_folder(tmp_path):
    with pytest.raises(LookupError):
        draw_wife(tmp_path / "missing", "bob")


def test_group_folder_base36(tmp_path):
    assert group_folder(tmp_path, 36) == Path(tmp_path) / "10"
    assert group_folder(tmp_path, 35).name == "z"
    assert group_folder(tmp_path, 0).name == "0"
    assert int(group_folder(tmp_path, 987654321).name, 36) == 987654321