"""Unit tests for the latest-state sensor store."""

from __future__ import annotations

from pathlib import Path

from datastore.event_ring import EventRing
from datastore.sensor_config import parse_config
from datastore.sensor_store import SensorStore
from storage.raw_log import RawLog

_CONFIG = [
    "OPTION w1.scan.period 30\n",
    "w1 28-0001 kitchen temp Celsius\n",
    "w1 28-0002 garage temp\n",
    "zwave node-3 garage door\n",
    "w1 28-0004 attic temp\n",
]


class FakeClock:
    def __init__(self, now: float = 1_000) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _store(tmp_path: Path, clock: FakeClock | None = None, capacity: int = 16) -> SensorStore:
    return SensorStore(
        parse_config(_CONFIG),
        ring=EventRing(capacity),
        raw_log=RawLog(tmp_path / "raw.csv"),
        clock=clock or FakeClock(),
    )


def test_set_updates_value_and_timestamp(tmp_path: Path) -> None:
    clock = FakeClock(1_234)
    store = _store(tmp_path, clock)

    assert store.set("w1", "28-0001", "21.5") is True

    record = store.get("w1", "28-0001")
    assert record is not None
    assert record.value == "21.5"
    assert record.unit == "Celsius"
    assert record.timestamp == 1_234
    assert len(store.ring) == 1


def test_set_unknown_sensor_changes_nothing(tmp_path: Path) -> None:
    store = _store(tmp_path)
    before = [(r.key, r.value, r.unit, r.timestamp) for r in store.records()]

    assert store.set("w1", "99-9999", "12.0", "Celsius") is False

    after = [(r.key, r.value, r.unit, r.timestamp) for r in store.records()]
    assert after == before
    assert len(store) == 4
    assert len(store.ring) == 0
    assert not (tmp_path / "raw.csv").exists()


def test_first_unit_wins(tmp_path: Path) -> None:
    store = _store(tmp_path)

    store.set("w1", "28-0002", "10", "Celsius")
    store.set("w1", "28-0002", "50", "Fahrenheit")

    record = store.get("w1", "28-0002")
    assert record is not None
    assert record.unit == "Celsius"
    assert record.value == "50"


def test_empty_unit_does_not_set_unit(tmp_path: Path) -> None:
    store = _store(tmp_path)

    store.set("w1", "28-0002", "10", "")
    store.set("w1", "28-0002", "11", None)

    record = store.get("w1", "28-0002")
    assert record is not None
    assert record.unit == ""


def test_long_values_are_truncated(tmp_path: Path) -> None:
    store = _store(tmp_path)

    store.set("zwave", "node-3", "x" * 500, "y" * 100)

    record = store.get("zwave", "node-3")
    assert record is not None
    assert record.value == "x" * 127
    assert record.unit == "y" * 31


def test_set_appends_raw_log_line(tmp_path: Path) -> None:
    clock = FakeClock(1_000)
    store = _store(tmp_path, clock)

    store.set("w1", "28-0001", "21.5")
    clock.now = 1_005
    store.set("zwave", "node-3", "open, locked", "state")

    assert store.raw_log is not None
    assert store.raw_log.is_open
    assert store.raw_log.last_write == 1_005
    store.close()
    assert not store.raw_log.is_open
    assert (tmp_path / "raw.csv").read_text().splitlines() == [
        "1000,kitchen,temp,21.5,Celsius",
        '1005,garage,door,"open, locked",state',
    ]


def test_raw_log_failure_keeps_memory_update(tmp_path: Path, caplog) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    store = SensorStore(
        parse_config(_CONFIG),
        ring=EventRing(4),
        raw_log=RawLog(blocker / "raw.csv"),
        clock=FakeClock(),
    )

    assert store.set("w1", "28-0001", "20") is True

    assert store.get("w1", "28-0001").value == "20"  # type: ignore[union-attr]
    assert len(store.ring) == 1
    assert "Cannot write raw log" in caplog.text


def test_device_cursor_iterates_one_driver(tmp_path: Path) -> None:
    store = _store(tmp_path)

    seen = []
    device = store.device_first("w1")
    while device is not None:
        seen.append(device)
        device = store.device_next("w1")

    assert seen == ["28-0001", "28-0002", "28-0004"]
    assert store.device_next("w1") is None
    assert store.device_first("w1") == "28-0001"
    assert store.device_first("zwave") == "node-3"
    assert store.device_next("zwave") is None
    assert store.device_first("unknown") is None
    assert list(store.devices("w1")) == seen


def test_option_lookup(tmp_path: Path) -> None:
    store = _store(tmp_path)

    assert store.option("w1.scan.period") == "30"
    assert store.option("w1.scan") is None


def test_records_in_follow_location_order(tmp_path: Path) -> None:
    store = _store(tmp_path)

    assert store.locations() == ["kitchen", "garage", "attic"]
    assert [r.device for r in store.records_in("garage")] == ["node-3", "28-0002"]


def test_events_are_newest_first(tmp_path: Path) -> None:
    clock = FakeClock(100)
    store = _store(tmp_path, clock)

    store.set("w1", "28-0001", "1")
    clock.now = 101
    store.set("w1", "28-0002", "2")
    clock.now = 102
    store.set("w1", "28-0001", "3")

    events = list(store.events())
    assert [(e.sensor.device, e.value, e.timestamp) for e in events] == [
        ("28-0001", "3", 102),
        ("28-0002", "2", 101),
        ("28-0001", "1", 100),
    ]
    assert [e.value for e in store.events(limit=2)] == ["3", "2"]
