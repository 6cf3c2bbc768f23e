from datetime import datetime

import pytest

from qqbotplug.clock import Clock, CronSpec, TimerStore, build_alert
from qqbotplug.timer_model import filled_cron_timer, filled_timer


@pytest.fixture
def store(tmp_path):
    s = TimerStore(tmp_path / "timers.db")
    yield s
    s.close()


@pytest.fixture
def sent():
    return []


@pytest.fixture
def clock(store, sent):
    c = Clock(store, lambda sid, gid, msg: sent.append((sid, gid, msg)))
    yield c
    c.close()


def test_source_clock_case(clock, store):
    t = filled_timer(["", "12", "-1", "12", "0", "", "test"], 0, 0, False)
    clock.add_timer_into_db(t)
    assert store.all() == [t]
    assert clock.list_timers(0) == []
    clock.add_timer_into_map(t)
    assert clock.list_timers(0) == ["12月1周12:0\n"]


def test_cron_parse_and_next():
    spec = CronSpec.parse("30 16 * * 6")
    assert spec.next_after(datetime(2022, 6, 13, 10, 0)) == datetime(2022, 6, 18, 16, 30)
    assert spec.matches(datetime(2022, 6, 18, 16, 30))
    assert not spec.matches(datetime(2022, 6, 18, 16, 31))


def test_cron_step():
    spec = CronSpec.parse("*/15 * * * *")
    assert spec.next_after(datetime(2022, 6, 13, 10, 7, 42)) == datetime(2022, 6, 13, 10, 15)


def test_cron_day_or_weekday():
    spec = CronSpec.parse("0 0 13 * 5")
    assert spec.matches(datetime(2022, 6, 13, 0, 0))
    assert spec.matches(datetime(2022, 6, 17, 0, 0))
    assert not spec.matches(datetime(2022, 6, 14, 0, 0))
    starred = CronSpec.parse("0 0 * * 5")
    assert not starred.matches(datetime(2022, 6, 13, 0, 0))


def test_cron_descriptor_and_names():
    assert CronSpec.parse("@daily") == CronSpec.parse("0 0 * * *")
    assert CronSpec.parse("0 0 1 jan sun") == CronSpec.parse("0 0 1 1 0")


@pytest.mark.parametrize("expr", ["* * * *", "61 * * * *", "* * * * 7", "5-1 * * * *", "@never"])
def test_cron_invalid(expr):
    with pytest.raises(ValueError):
        CronSpec.parse(expr)


def test_cron_impossible_date_gives_none():
    spec = CronSpec.parse("0 0 31 2 *")
    assert spec.next_after(datetime(2022, 1, 1)) is None


def test_store_roundtrip(store):
    t = filled_cron_timer("0 8 * * *", "hi", "", 1, 5)
    t.id = t.timer_id
    store.insert(t)
    store.insert(t)
    assert store.all() == [t]
    store.delete(t.id)
    assert store.all() == []


def test_build_alert():
    plain = filled_cron_timer("0 8 * * *", "hi", "", 1, 5)
    segments = build_alert(plain)
    assert segments[0] == {"type": "at", "data": {"qq": "all"}}
    assert segments[1]["data"]["text"] == "hi"
    assert len(segments) == 2
    with_image = filled_cron_timer("0 8 * * *", "hi", "http://img", 1, 5)
    assert build_alert(with_image)[2] == {
        "type": "image",
        "data": {"file": "http://img", "cache": "0"},
    }


def test_register_and_cancel_cron(clock, store):
    t = filled_cron_timer("0 8 * * *", "hi", "", 1, 5)
    assert clock.register_timer(t, True)
    assert t.id == t.timer_id
    assert clock.get_timer(t.id) is t
    assert store.all() == [t]
    assert clock.list_timers(5) == ["0 8 * * *\n"]
    assert clock.list_timers(6) == []
    assert clock.cancel_timer(t.id)
    assert clock.get_timer(t.id) is None
    assert store.all() == []
    assert not clock.cancel_timer(t.id)


def test_register_invalid_cron(clock, store):
    t = filled_cron_timer("not a cron", "hi", "", 1, 5)
    assert not clock.register_timer(t, True)
    assert t.alert != "hi"
    assert store.all() == []
    assert clock.get_timer(t.id) is None


def test_register_dated_timer(clock, store):
    t = filled_timer(["", "每", "每周", "8", "30", "", "x"], 0, 7, False)
    assert clock.register_timer(t, True)
    assert clock.list_timers(7) == ["每月每周8:30\n"]
    assert store.all() == [t]
    assert clock.cancel_timer(t.id)
    assert not t.enabled
    assert store.all() == []


def test_duplicate_registration_replaces(clock, store):
    first = filled_timer(["", "12", "-1", "12", "0", "", "a"], 0, 3, False)
    second = filled_timer(["", "12", "-1", "12", "0", "", "b"], 0, 3, False)
    clock.register_timer(first, True)
    clock.register_timer(second, True)
    assert not first.enabled
    assert clock.get_timer(second.id) is second
    assert [t.alert for t in store.all()] == ["b"]


def test_clock_loads_stored_timers(store, sent):
    t = filled_cron_timer("0 8 * * *", "hi", "", 1, 5)
    t.id = t.timer_id
    store.insert(t)
    with Clock(store, lambda *a: sent.append(a)) as c:
        loaded = c.get_timer(t.id)
        assert loaded == t
        assert c.list_timers(5) == ["0 8 * * *\n"]