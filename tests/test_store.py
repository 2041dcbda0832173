from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from sample_chunks import CapacityExceeded, SeriesStore, StoreConfig, replay

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


def test_record_pushes_every_series_at_shared_index() -> None:
    store = SeriesStore(StoreConfig(series=["x", "y"]))

    assert store.record(_at(0), {"x": 1.0, "y": 10.0}) == 0
    assert store.record(_at(1), {"x": 2.0, "y": 20.0}) == 1

    assert store.series("x").values() == [1.0, 2.0]
    assert store.series("y").get(1) == 20.0
    assert store.names == ["x", "y"]
    assert "x" in store


def test_record_rejects_missing_and_unknown_series_without_storing() -> None:
    store = SeriesStore(StoreConfig(series=["x", "y"]))

    with pytest.raises(KeyError, match="y"):
        store.record(_at(0), {"x": 1.0})
    with pytest.raises(KeyError, match="z"):
        store.record(_at(0), {"x": 1.0, "y": 2.0, "z": 3.0})

    assert len(store.timeline) == 0
    assert store.series("x").no_elements()


def test_unknown_series_lookup_names_registered() -> None:
    store = SeriesStore(StoreConfig(series=["x"]))
    with pytest.raises(KeyError, match="Registered"):
        store.series("nope")


def test_duplicate_series_rejected() -> None:
    store = SeriesStore()
    store.add_series("x")
    with pytest.raises(ValueError):
        store.add_series("x")


def test_late_series_starts_at_next_index_and_window_aligns() -> None:
    store = SeriesStore(StoreConfig(series=["x"]))
    for i in range(3):
        store.record(_at(i), {"x": i})

    late = store.add_series("y")
    assert late.base == 3

    for i in range(3, 5):
        store.record(_at(i), {"x": i, "y": i * 10})

    assert list(store.window()) == [(3, (3, 30)), (4, (4, 40))]
    assert list(store.window(["x"]))[0] == (0, (0,))


def test_overflow_raise_leaves_store_untouched() -> None:
    store = SeriesStore(StoreConfig(series=["x"], capacity=2))
    store.record(_at(0), {"x": 0})
    store.record(_at(1), {"x": 1})

    with pytest.raises(CapacityExceeded) as excinfo:
        store.record(_at(2), {"x": 2})

    assert excinfo.value.value == 2
    assert store.timeline.next_index == 2
    assert store.series("x").values() == [0, 1]


def test_overflow_drop_oldest_keeps_latest_values(caplog: pytest.LogCaptureFixture) -> None:
    store = SeriesStore(StoreConfig(series=["x"], capacity=2, overflow="drop_oldest"))

    with caplog.at_level(logging.DEBUG, logger="sample_chunks.store"):
        for i in range(5):
            store.record(_at(i), {"x": i})

    chunk = store.series("x")
    assert chunk.values() == [3, 4]
    assert chunk.base == 3
    assert "dropped_oldest" in caplog.text


def test_prune_older_than_prunes_timeline_and_chunks() -> None:
    store = SeriesStore(StoreConfig(series=["x", "y"]))
    for i in range(6):
        store.record(_at(i), {"x": i, "y": -i})

    new_base = store.prune_older_than(timedelta(seconds=2))

    assert new_base == 3
    assert store.timeline.base == 3
    assert store.series("x").values() == [3, 4, 5]
    assert store.series("y").base == 3
    assert store.series("y").storage_size == 3


def test_prune_older_than_without_expired_checkpoints() -> None:
    store = SeriesStore(StoreConfig(series=["x"], checkpoint_every=10))
    for i in range(3):
        store.record(_at(i), {"x": i})

    assert store.prune_older_than(timedelta(seconds=1)) is None
    assert store.series("x").base == 0


def test_max_age_prunes_while_recording() -> None:
    store = SeriesStore(StoreConfig(series=["x"], max_age_s=1.5))
    for i in range(10):
        store.record(_at(i), {"x": i})

    chunk = store.series("x")
    assert chunk.last() == 9
    assert chunk.base == store.timeline.base
    assert len(chunk) <= 3


def test_manual_prune() -> None:
    store = SeriesStore(StoreConfig(series=["x"], shrink_slack=1))
    for i in range(5):
        store.record(_at(i), {"x": i})

    store.prune(2)

    assert store.timeline.base == 2
    assert store.series("x").values() == [2, 3, 4]
    assert store.series("x").storage_size <= 4


def test_to_frame_uses_absolute_index_and_times() -> None:
    store = SeriesStore(StoreConfig(series=["x"]))
    for i in range(4):
        store.record(_at(i), {"x": float(i)})
    store.add_series("y")
    store.record(_at(4), {"x": 4.0, "y": 40.0})
    store.record(_at(5), {"x": 5.0, "y": 50.0})

    frame = store.to_frame()

    assert list(frame.columns) == ["time", "x", "y"]
    assert list(frame.index) == [4, 5]
    assert frame.loc[5, "y"] == 50.0
    assert frame.loc[4, "time"] == pd.Timestamp(_at(4))


def test_to_frame_empty_store() -> None:
    frame = SeriesStore(StoreConfig(series=["x"])).to_frame()
    assert frame.empty
    assert list(frame.columns) == ["time", "x"]


def test_summary_and_replay() -> None:
    store = SeriesStore(StoreConfig(series=["value"], capacity=3, overflow="drop_oldest"))

    count = replay(store, ({"value": v} for v in [1.0, 2.0, 3.0, 4.0]), start=T0, sample_rate=2.0)

    assert count == 4
    assert store.timeline.latest == _at(1.5)
    assert store.summary() == {"value": {"base": 1, "len": 3, "first": 2.0, "last": 4.0}}


def test_replay_requires_positive_rate() -> None:
    with pytest.raises(ValueError):
        replay(SeriesStore(), [], start=T0, sample_rate=0)


def test_drop_oldest_keeps_timeline_bounded() -> None:
    store = SeriesStore(StoreConfig(series=["x", "y"], capacity=3, overflow="drop_oldest"))

    for i in range(1000):
        store.record(_at(i), {"x": i, "y": -i})

    assert len(store.timeline) <= 3
    assert len(store.timeline.checkpoints) <= 3
    assert store.timeline.base == store.series("x").base == 997
    assert store.timeline.times() == [_at(997), _at(998), _at(999)]
    assert list(store.window()) == [(997, (997, -997)), (998, (998, -998)), (999, (999, -999))]
