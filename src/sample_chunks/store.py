"""Named per-series windows sharing one time axis."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .chunk import Chunk
from .config import StoreConfig, load_store_config
from .exceptions import CapacityExceeded
from .iteration import iter_lockstep
from .logging_utils import log_event
from .timeline import OffsetTimeline

logger = logging.getLogger(__name__)


class SeriesStore:
    """Keeps a bounded window per series, all indexed against one timeline.

    Series registered after recording has started begin at the timeline's
    next index, so chunks in the same store routinely have different bases.
    :meth:`window` and :meth:`to_frame` line them up by absolute index.
    """

    def __init__(self, config: StoreConfig | None = None) -> None:
        self.config = config or StoreConfig()
        self.timeline = OffsetTimeline()
        self._series: Dict[str, Chunk[Any]] = {}
        self._recorded = 0
        for name in self.config.series:
            self.add_series(name)

    @classmethod
    def from_config_file(cls, path: str | Path) -> "SeriesStore":
        return cls(load_store_config(path))

    @property
    def names(self) -> List[str]:
        return list(self._series)

    def __contains__(self, name: object) -> bool:
        return name in self._series

    def add_series(self, name: str) -> Chunk[Any]:
        if name in self._series:
            raise ValueError(f"Series '{name}' already registered")
        chunk: Chunk[Any] = Chunk(self.config.capacity)
        chunk.prune(self.timeline.next_index)
        self._series[name] = chunk
        log_event(logger, "series_added", level=logging.DEBUG, series=name, base=chunk.base)
        return chunk

    def series(self, name: str) -> Chunk[Any]:
        try:
            return self._series[name]
        except KeyError:
            raise KeyError(f"Unknown series '{name}'. Registered: {sorted(self._series)}") from None

    def record(self, time: datetime, values: Mapping[str, Any]) -> int:
        """Record one value per series at ``time`` and return its absolute index.

        Nothing is stored if a series is missing, a name is unknown, ``time``
        goes backwards or, with the ``"raise"`` overflow policy, a chunk is
        full.
        """

        missing = sorted(set(self._series) - set(values))
        if missing:
            raise KeyError(f"missing values for series: {', '.join(missing)}")
        unknown = sorted(set(values) - set(self._series))
        if unknown:
            raise KeyError(f"unknown series: {', '.join(unknown)}")

        if self.config.overflow == "raise":
            for name, chunk in self._series.items():
                if chunk.capacity is not None and len(chunk) >= chunk.capacity:
                    log_event(logger, "capacity_exceeded", level=logging.WARNING, series=name, capacity=chunk.capacity)
                    raise CapacityExceeded(values[name], chunk.capacity)

        index = self.timeline.add(time)
        for name, chunk in self._series.items():
            self._push(name, chunk, values[name])

        self._recorded += 1
        if self._recorded % self.config.checkpoint_every == 0:
            self.timeline.checkpoint()
        if self.config.max_age_s is not None:
            self.prune_older_than(timedelta(seconds=self.config.max_age_s))
        if self._series:
            # overflow drops can leave every chunk ahead of the timeline
            self.timeline.prune_to(min(chunk.base for chunk in self._series.values()))
        return index

    def _push(self, name: str, chunk: Chunk[Any], value: Any) -> None:
        try:
            chunk.try_push(value)
        except CapacityExceeded as exc:
            chunk.prune(chunk.base + 1)
            log_event(logger, "dropped_oldest", level=logging.DEBUG, series=name, base=chunk.base)
            chunk.try_push(exc.value)

    def checkpoint(self) -> None:
        self.timeline.checkpoint()

    def prune(self, min_index: int) -> None:
        """Prune the timeline and every series below ``min_index``."""

        self.timeline.prune_to(min_index)
        for chunk in self._series.values():
            chunk.prune(min_index)
            chunk.shrink(self.config.shrink_slack)
        log_event(logger, "pruned", level=logging.DEBUG, min_index=min_index, series=len(self._series))

    def prune_older_than(self, max_age: timedelta) -> Optional[int]:
        """Drop samples older than ``max_age``; returns the new base or ``None``."""

        new_base = self.timeline.prune(max_age)
        if new_base is None:
            return None
        for chunk in self._series.values():
            chunk.prune(new_base)
            chunk.shrink(self.config.shrink_slack)
        log_event(logger, "pruned_by_age", max_age_s=max_age.total_seconds(), base=new_base)
        return new_base

    def _select(self, names: Optional[Sequence[str]]) -> List[Tuple[str, Chunk[Any]]]:
        if names is None:
            return list(self._series.items())
        return [(name, self.series(name)) for name in names]

    def window(self, names: Optional[Sequence[str]] = None) -> Iterator[Tuple[int, Tuple[Any, ...]]]:
        """Rows of ``(index, values)`` covering the indices every series holds."""

        return iter_lockstep(chunk for _, chunk in self._select(names))

    def to_frame(self, names: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """The lock-step window as a DataFrame indexed by absolute index."""

        selected = self._select(names)
        columns = [name for name, _ in selected]
        rows = list(iter_lockstep(chunk for _, chunk in selected))
        times = self.timeline.times()
        base = self.timeline.base

        frame = pd.DataFrame(
            [values for _, values in rows],
            columns=columns,
            index=pd.Index([index for index, _ in rows], name="index", dtype="int64"),
        )
        frame.insert(0, "time", pd.to_datetime([times[index - base] for index, _ in rows]))
        return frame

    def summary(self) -> Dict[str, Dict[str, Any]]:
        return {
            name: {
                "base": chunk.base,
                "len": len(chunk),
                "first": chunk.first(),
                "last": chunk.last(),
            }
            for name, chunk in self._series.items()
        }


def replay(
    store: SeriesStore,
    samples: Iterable[Mapping[str, Any]],
    *,
    start: datetime,
    sample_rate: float,
) -> int:
    """Feed ``samples`` into ``store`` at a fixed rate; returns how many were recorded."""

    if sample_rate <= 0:
        raise ValueError("sample_rate must be positive")
    step = timedelta(seconds=1.0 / sample_rate)
    count = 0
    for count, values in enumerate(samples, start=1):
        store.record(start + step * (count - 1), values)
    log_event(logger, "replay_complete", samples=count, sample_rate=sample_rate)
    return count
