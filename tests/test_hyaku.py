import csv

import pytest

from qqbotplug.hyaku import BED, Poem, image_urls, load_poems

HEADER = ["番号", "歌人", "上の句", "下の句", "上の句ひらがな", "下の句ひらがな"]


def _write(path, rows):
    with open(path, "w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADER)
        writer.writerows(rows)


def _rows(count=100):
    return [[str(i), f"poet{i}", f"a{i}", f"b{i}", f"c{i}", f"d{i}"] for i in range(1, count + 1)]


def test_load_poems(tmp_path):
    path = tmp_path / "hyaku.csv"
    _write(path, _rows())
    poems = load_poems(path)
    assert len(poems) == 100
    assert poems[0] == Poem("1", "poet1", "a1", "b1", "c1", "d1")
    assert poems[99].number == "100"


def test_poem_str():
    poem = Poem("1", "天智天皇", "x", "y", "z", "w")
    text = str(poem)
    assert text.startswith("●番号：1\n◉歌人：天智天皇\n")
    assert text.endswith("◎下の句ひらがな：w\n")
    assert text.count("\n") == 6


def test_wrong_count_rejected(tmp_path):
    path = tmp_path / "hyaku.csv"
    _write(path, _rows(99))
    with pytest.raises(ValueError):
        load_poems(path)


def test_misnumbered_rejected(tmp_path):
    rows = _rows()
    rows[0], rows[1] = rows[1], rows[0]
    path = tmp_path / "hyaku.csv"
    _write(path, rows)
    with pytest.raises(ValueError):
        load_poems(path)


def test_short_row_rejected(tmp_path):
    rows = _rows()
    rows[5] = rows[5][:5]
    path = tmp_path / "hyaku.csv"
    _write(path, rows)
    with pytest.raises(ValueError):
        load_poems(path)


def test_image_urls():
    jpg, png = image_urls(7)
    assert jpg == BED + "img/007.jpg"
    assert png == BED + "img/007.png"


@pytest.mark.parametrize("n", [0, 101])
def test_image_urls_out_of_range(n):
    with pytest.raises(ValueError):
        image_urls(n)