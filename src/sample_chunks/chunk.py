"""Bounded, absolutely indexed window of values."""

from __future__ import annotations

from typing import Any, Generic, Iterator, List, Optional, TypeVar

from .exceptions import CapacityExceeded
from .iteration import AlignedChunkIterator, ChunkIterator

D = TypeVar("D")


class Chunk(Generic[D]):
    """Sliding window of values addressed by a stable absolute index.

    Every pushed value is assigned the next absolute index (``base + len``).
    Pruning discards the oldest values and moves ``base`` forward without
    renumbering what is left, so an index handed out once keeps pointing at
    the same value until that value is pruned.

    Storage is a list whose leading slots are released (set to ``None``) as
    values are pruned. The list is compacted once released slots outnumber
    live ones, or explicitly through :meth:`shrink`.

    Chunks are not thread-safe. Any mutation invalidates live iterators.
    """

    def __init__(self, capacity: int | None = None) -> None:
        if capacity is not None and capacity < 0:
            raise ValueError("capacity must be non-negative")
        self._capacity = capacity
        self._items: List[Any] = []
        self._dead = 0
        self._base = 0
        self._version = 0

    # ------------------------------------------------------------------ #
    # bookkeeping
    # ------------------------------------------------------------------ #
    @property
    def base(self) -> int:
        """Absolute index of the oldest retained value."""

        return self._base

    @property
    def next_index(self) -> int:
        """Absolute index the next pushed value will receive."""

        return self._base + len(self)

    @property
    def capacity(self) -> int | None:
        return self._capacity

    @property
    def storage_size(self) -> int:
        """Number of backing slots currently held, released ones included."""

        return len(self._items)

    def __len__(self) -> int:
        return len(self._items) - self._dead

    def __contains__(self, index: object) -> bool:
        """Whether absolute ``index`` is currently held (not whether a value is stored)."""

        if not isinstance(index, int) or isinstance(index, bool):
            return False
        if index < self._base:
            return False
        return index - self._base < len(self)

    def no_elements(self) -> bool:
        return len(self) == 0

    # ------------------------------------------------------------------ #
    # mutation
    # ------------------------------------------------------------------ #
    def push(self, value: D) -> None:
        """Append ``value`` regardless of the capacity bound."""

        self._items.append(value)
        self._version += 1

    def try_push(self, value: D) -> None:
        """Append ``value`` unless the capacity bound is reached.

        Raises:
            CapacityExceeded: the chunk is full. The chunk is left untouched
                and the rejected value is available on the exception.
        """

        if self._capacity is not None and len(self) >= self._capacity:
            raise CapacityExceeded(value, self._capacity)
        self.push(value)

    def prune(self, min_index: int) -> None:
        """Drop every value whose absolute index is below ``min_index``.

        Targets at or below ``base`` leave the chunk untouched. Targets past
        the newest value empty the chunk and move ``base`` to ``min_index``.
        """

        if min_index <= self._base:
            return

        drop = min_index - self._base
        remaining = len(self) - drop
        if remaining <= 0:
            self._items.clear()
            self._dead = 0
        else:
            start = self._dead
            self._items[start : start + drop] = [None] * drop
            self._dead += drop
            if self._dead > remaining:
                self._compact(0)

        self._base = min_index
        self._version += 1

    def shrink(self, extra_slack: int = 0) -> None:
        """Release backing slots beyond ``len + extra_slack``."""

        if extra_slack < 0:
            raise ValueError("extra_slack must be non-negative")
        self._compact(extra_slack)
        if extra_slack == 0:
            # slicing allocates exactly len(self) slots
            self._items = self._items[:]

    def clear(self) -> None:
        """Remove all values. ``base`` is kept as is."""

        self._items.clear()
        self._dead = 0
        self._version += 1

    def _compact(self, keep: int) -> None:
        excess = self._dead - keep
        if excess > 0:
            del self._items[:excess]
            self._dead -= excess

    # ------------------------------------------------------------------ #
    # access
    # ------------------------------------------------------------------ #
    def _at(self, position: int) -> D:
        return self._items[self._dead + position]

    def first(self) -> Optional[D]:
        if not len(self):
            return None
        return self._at(0)

    def last(self) -> Optional[D]:
        if not len(self):
            return None
        return self._items[-1]

    def get(self, index: int, default: Optional[D] = None) -> Optional[D]:
        """Return the value stored at absolute ``index`` or ``default``."""

        if index < self._base:
            return default
        position = index - self._base
        if position >= len(self):
            return default
        return self._at(position)

    def values(self) -> List[D]:
        """Copy of the retained values, oldest first."""

        return self._items[self._dead :]

    # ------------------------------------------------------------------ #
    # iteration
    # ------------------------------------------------------------------ #
    def iter(self) -> ChunkIterator[D]:
        """Reversible iterator of ``(absolute_index, value)`` pairs."""

        return ChunkIterator(self)

    def iter_along_base(self, target: int) -> AlignedChunkIterator[D]:
        """Iterate ``(absolute_index, value)`` pairs starting at ``target``.

        Values below ``max(target, base)`` are skipped so several chunks with
        different prune histories can be walked from a shared index.
        """

        return AlignedChunkIterator(self, target)

    def __iter__(self) -> Iterator[D]:
        return (value for _, value in self.iter())

    def __reversed__(self) -> Iterator[D]:
        return (value for _, value in reversed(self.iter()))

    # ------------------------------------------------------------------ #
    # duplication and comparison
    # ------------------------------------------------------------------ #
    def copy(self) -> "Chunk[D]":
        """Independent chunk with the same base, values and capacity."""

        duplicate: Chunk[D] = Chunk(self._capacity)
        duplicate._items = self.values()
        duplicate._base = self._base
        return duplicate

    __copy__ = copy

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Chunk):
            return NotImplemented
        return (
            self._base == other._base
            and self._capacity == other._capacity
            and self.values() == other.values()
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Chunk(base={self._base}, capacity={self._capacity}, elements={self.values()!r})"
