"""Compact time axis shared by absolutely indexed series."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional, Tuple

import numpy as np

_MS = timedelta(milliseconds=1)


class OffsetTimeline:
    """Timestamps stored as millisecond offsets from the previous sample.

    Only the newest timestamp is kept whole; older ones are rebuilt by
    walking the offsets backwards, so resolution is one millisecond. Each
    added time receives an absolute index in the same coordinate space as
    :class:`~sample_chunks.chunk.Chunk`, and pruning hands back the index
    the chunks should be pruned to.
    """

    def __init__(self) -> None:
        self._offsets: List[int] = []
        self._latest: Optional[datetime] = None
        self._base = 0
        self._checkpoints: List[Tuple[datetime, int]] = []

    @property
    def base(self) -> int:
        return self._base

    @property
    def next_index(self) -> int:
        return self._base + len(self)

    @property
    def latest(self) -> Optional[datetime]:
        return self._latest

    @property
    def checkpoints(self) -> List[Tuple[datetime, int]]:
        return list(self._checkpoints)

    def __len__(self) -> int:
        if self._latest is None:
            return 0
        return len(self._offsets) + 1

    def add(self, time: datetime) -> int:
        """Append ``time`` and return the absolute index assigned to it."""

        index = self.next_index
        if self._latest is not None:
            if time < self._latest:
                raise ValueError(f"time {time.isoformat()} is earlier than latest {self._latest.isoformat()}")
            self._offsets.append(int((time - self._latest) / _MS))
        self._latest = time
        return index

    def checkpoint(self) -> None:
        """Remember the newest time as a pruning boundary."""

        if self._latest is not None:
            self._checkpoints.append((self._latest, self.next_index - 1))

    def prune(self, max_age: timedelta) -> Optional[int]:
        """Approximately drop times older than ``max_age``.

        Checkpoints older than ``max_age`` (measured from the newest time)
        are discarded, always keeping the newest checkpoint, and every time up
        to and including the last discarded one is dropped. Returns the new
        base index, or ``None`` when no checkpoint expired.
        """

        if self._latest is None or not self._checkpoints:
            return None

        expired = 0
        for instant, _ in self._checkpoints:
            if self._latest - instant <= max_age:
                break
            expired += 1
        expired = min(expired, len(self._checkpoints) - 1)
        if expired == 0:
            return None

        _, index = self._checkpoints[expired - 1]
        del self._checkpoints[:expired]
        self.prune_to(index + 1)
        return self._base

    def prune_to(self, index: int) -> None:
        """Drop times below absolute ``index``; no-op at or below :attr:`base`."""

        if index <= self._base:
            return
        drop = index - self._base
        if drop >= len(self):
            self._offsets.clear()
            self._latest = None
        else:
            del self._offsets[:drop]
        self._checkpoints = [checkpoint for checkpoint in self._checkpoints if checkpoint[1] >= index]
        self._base = index

    def times(self) -> List[datetime]:
        """Rebuild every retained timestamp, oldest first."""

        if self._latest is None:
            return []
        offsets = np.asarray(self._offsets, dtype=np.int64)
        before_latest = np.concatenate((np.cumsum(offsets[::-1])[::-1], [0]))
        return [self._latest - timedelta(milliseconds=int(ms)) for ms in before_latest]

    def time_at(self, index: int) -> Optional[datetime]:
        if self._latest is None or index < self._base:
            return None
        position = index - self._base
        if position >= len(self):
            return None
        return self._latest - timedelta(milliseconds=sum(self._offsets[position:]))
