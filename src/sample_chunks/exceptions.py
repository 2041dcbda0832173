"""Exception types raised by sample_chunks containers."""

from __future__ import annotations

from typing import Any


class SampleChunksError(Exception):
    """Base class for all sample_chunks errors."""


class CapacityExceeded(SampleChunksError):
    """Raised by ``try_push`` when a bounded chunk is already full.

    The rejected value is handed back on ``value`` so the caller can prune
    and retry or drop it.
    """

    def __init__(self, value: Any, capacity: int) -> None:
        super().__init__(f"chunk capacity of {capacity} reached")
        self.value = value
        self.capacity = capacity


class PruneOutOfRange(SampleChunksError):
    """Raised when pruning through an index that was never assigned."""

    def __init__(self, index: int, stored_length: int) -> None:
        super().__init__(f"cannot prune through index {index}; only {stored_length} indices assigned")
        self.index = index
        self.stored_length = stored_length
