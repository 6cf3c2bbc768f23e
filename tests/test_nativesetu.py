import random

import pytest
from PIL import Image

from qqbotplug.nativesetu import SetuStore, difference_hash


def _gradient(increasing: bool) -> Image.Image:
    img = Image.new("L", (90, 16))
    for x in range(90):
        value = x * 2 if increasing else 180 - x * 2
        for y in range(16):
            img.putpixel((x, y), value)
    return img


@pytest.fixture
def library(tmp_path):
    root = tmp_path / "pics"
    (root / "cats").mkdir(parents=True)
    (root / "dogs").mkdir()
    _gradient(True).save(root / "cats" / "a.png")
    _gradient(False).save(root / "cats" / "b.PNG")
    (root / "cats" / "notes.txt").write_text("ignore me")
    Image.new("RGB", (20, 20), "red").save(root / "dogs" / "c.jpg")
    return root


def test_difference_hash_gradients():
    assert difference_hash(_gradient(True)) == -1
    assert difference_hash(_gradient(False)) == 0
    assert difference_hash(Image.new("RGB", (30, 30), "blue")) == 0


def test_scan_all_and_counts(tmp_path, library):
    with SetuStore(tmp_path / "data.db") as store:
        store.scan_all(library)
        assert store.classes() == ["cats", "dogs"]
        assert store.count("cats") == 2
        assert store.count("dogs") == 1
        assert store.summary() == "所有本地setu分类\n00. cats(2)\n01. dogs(1)"


def test_pick_returns_relative_path(tmp_path, library):
    with SetuStore(tmp_path / "data.db") as store:
        store.scan_all(library)
        picked = store.pick("dogs", random.Random(1))
        assert picked.path == "dogs/c.jpg"
        assert picked.name == "c.jpg"
        cat = store.pick("cats", random.Random(3))
        assert cat.path in {"cats/a.png", "cats/b.PNG"}


def test_unknown_class(tmp_path, library):
    with SetuStore(tmp_path / "data.db") as store:
        store.scan_all(library)
        with pytest.raises(LookupError):
            store.pick("birds")
        with pytest.raises(LookupError):
            store.count("birds")


def test_scan_class_refreshes(tmp_path, library):
    with SetuStore(tmp_path / "data.db") as store:
        store.scan_all(library)
        (library / "cats" / "b.PNG").unlink()
        store.scan_class(library, "cats", "cats")
        assert store.count("cats") == 1


def test_broken_image_raises(tmp_path, library):
    (library / "dogs" / "bad.png").write_bytes(b"not an image")
    with SetuStore(tmp_path / "data.db") as store:
        with pytest.raises(OSError):
            store.scan_all(library)