import pytest

from qqbotplug.omikuji import KujiStore, omikuji_images


@pytest.fixture
def store(tmp_path):
    s = KujiStore(tmp_path / "kuji.db")
    yield s
    s.close()


def test_add_and_get_round_trip(store):
    store.add(7, "大吉")
    assert store.get(7) == "大吉"


def test_add_replaces(store):
    store.add(3, "凶")
    store.add(3, "吉")
    assert store.get(3) == "吉"
    assert store.count() == 1


def test_count(store):
    for i in range(1, 6):
        store.add(i, f"text {i}")
    assert store.count() == 5


def test_missing_raises(store):
    with pytest.raises(LookupError):
        store.get(42)


def test_persists(tmp_path):
    path = tmp_path / "k.db"
    with KujiStore(path) as s:
        s.add(1, "first")
    with KujiStore(path) as s:
        assert s.get(1) == "first"


def test_images():
    front, back = omikuji_images(5)
    assert front == "https://gitcode.net/u011570312/senso-ji-omikuji/-/raw/main/5_0.jpg"
    assert back == "https://gitcode.net/u011570312/senso-ji-omikuji/-/raw/main/5_1.jpg"


@pytest.mark.parametrize("n", [0, 101, -1])
def test_images_out_of_range(n):
    with pytest.raises(ValueError):
        omikuji_images(n)