"""Series of values that may contain breaks."""

from __future__ import annotations

from itertools import chain
from typing import Generic, Iterator, List, Optional, Sequence, Tuple, TypeVar

from .chunk import Chunk
from .exceptions import PruneOutOfRange

D = TypeVar("D")
T = TypeVar("T")


class ChunkedSeries(Generic[D]):
    """Values indexed against a shared axis where some indices have no value.

    Consecutive values are stored in one :class:`Chunk` segment whose base is
    the absolute index of its first value. A break (``try_push(None)`` or
    :meth:`insert_break`) seals the current segment, so gaps cost nothing.
    """

    def __init__(self) -> None:
        self._segments: List[Chunk[D]] = []
        self._next_index = 0
        self._base = 0
        self._active = False

    @property
    def length(self) -> int:
        """Indices consumed so far, gaps included."""

        return self._next_index

    @property
    def base(self) -> int:
        """Lowest absolute index that has not been pruned."""

        return self._base

    @property
    def segments(self) -> List[Chunk[D]]:
        return list(self._segments)

    def num_elements(self) -> int:
        return sum(len(segment) for segment in self._segments)

    def no_elements(self) -> bool:
        return self.num_elements() == 0

    def push(self, value: D) -> None:
        if self._active:
            self._segments[-1].push(value)
        else:
            segment: Chunk[D] = Chunk()
            segment.prune(self._next_index)
            segment.push(value)
            self._segments.append(segment)
            self._active = True
        self._next_index += 1

    def insert_break(self) -> None:
        """Seal the current segment; the next push starts a new one."""

        self._active = False

    def try_push(self, value: Optional[D]) -> None:
        """Push ``value``, or record a gap at the next index when it is ``None``."""

        if value is None:
            self.insert_break()
            self._next_index += 1
        else:
            self.push(value)

    def first(self) -> Optional[D]:
        return self._segments[0].first() if self._segments else None

    def last(self) -> Optional[D]:
        return self._segments[-1].last() if self._segments else None

    def iter_with_index(self, reverse: bool = False) -> Iterator[Tuple[int, D]]:
        if reverse:
            return chain.from_iterable(reversed(segment.iter()) for segment in reversed(self._segments))
        return chain.from_iterable(segment.iter() for segment in self._segments)

    def iter(self, reverse: bool = False) -> Iterator[D]:
        return (value for _, value in self.iter_with_index(reverse=reverse))

    def __iter__(self) -> Iterator[D]:
        return self.iter()

    def __reversed__(self) -> Iterator[D]:
        return self.iter(reverse=True)

    def iter_along_base(self, base_slice: Sequence[T]) -> Optional[Iterator[Tuple[T, D]]]:
        """Pair each value with the entry of ``base_slice`` at the same index.

        ``base_slice[0]`` lines up with :attr:`base`, which is how a time axis
        pruned alongside the series is laid out. Returns ``None`` when the
        slice cannot cover every retained index.
        """

        if len(base_slice) < self._next_index - self._base:
            return None
        base = self._base
        return ((base_slice[index - base], value) for index, value in self.iter_with_index())

    def prune(self, min_index: int) -> None:
        """Drop values and gaps below ``min_index``; no-op at or below :attr:`base`."""

        if min_index <= self._base:
            return

        for segment in self._segments:
            segment.prune(min_index)
        kept = [segment for segment in self._segments if not segment.no_elements()]
        if self._active and (not kept or kept[-1] is not self._segments[-1]):
            self._active = False
        self._segments = kept

        self._base = min_index
        if min_index > self._next_index:
            self._next_index = min_index

    def prune_through(self, index: int) -> None:
        """Drop everything up to and including ``index``.

        Raises:
            PruneOutOfRange: ``index`` has not been assigned yet.
        """

        if index >= self._next_index:
            raise PruneOutOfRange(index, self._next_index)
        self.prune(index + 1)

    def shrink(self) -> None:
        for segment in self._segments:
            segment.shrink()
        self._segments = self._segments[:]

    def prune_and_shrink(self, min_index: int) -> None:
        self.prune(min_index)
        self.shrink()

    def __repr__(self) -> str:
        return (
            f"ChunkedSeries(base={self._base}, length={self._next_index}, "
            f"segments={self._segments!r})"
        )
