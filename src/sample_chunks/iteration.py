"""Read-only traversal over chunks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, Iterable, Iterator, Tuple, TypeVar

if TYPE_CHECKING:
    from .chunk import Chunk

D = TypeVar("D")


class ChunkIterator(Generic[D]):
    """Double-ended iterator of ``(absolute_index, value)`` pairs.

    A front and a back cursor walk towards each other over the values the
    chunk held when the iterator was created; iteration ends when they meet.
    ``next()`` takes from the front, :meth:`next_back` from the back.
    Mutating the chunk afterwards makes the next step raise ``RuntimeError``.
    """

    def __init__(self, chunk: "Chunk[D]", start: int = 0) -> None:
        self._chunk = chunk
        self._version = chunk._version
        self._base = chunk.base
        self._back = len(chunk)
        self._front = min(start, self._back)

    def _check(self) -> None:
        if self._chunk._version != self._version:
            raise RuntimeError("Chunk mutated during iteration")

    def __iter__(self) -> "ChunkIterator[D]":
        return self

    def __next__(self) -> Tuple[int, D]:
        self._check()
        if self._front >= self._back:
            raise StopIteration
        position = self._front
        self._front += 1
        return self._base + position, self._chunk._at(position)

    def next_back(self) -> Tuple[int, D]:
        """Take the newest remaining pair; ``StopIteration`` when exhausted."""

        self._check()
        if self._front >= self._back:
            raise StopIteration
        self._back -= 1
        return self._base + self._back, self._chunk._at(self._back)

    def __reversed__(self) -> Iterator[Tuple[int, D]]:
        while True:
            self._check()
            if self._front >= self._back:
                return
            yield self.next_back()

    def __len__(self) -> int:
        return self._back - self._front


class AlignedChunkIterator(ChunkIterator[D]):
    """Chunk iterator that skips every index below ``target``."""

    def __init__(self, chunk: "Chunk[D]", target: int) -> None:
        base = chunk.base
        # only subtract once target is known to be ahead of base
        offset = target - base if target > base else 0
        super().__init__(chunk, offset)
        self.target = target
        self.start = max(target, base)


def iter_lockstep(
    chunks: Iterable["Chunk[D]"], start: int | None = None
) -> Iterator[Tuple[int, Tuple[D, ...]]]:
    """Walk several chunks together by absolute index.

    Yields ``(index, values)`` for every index held by all chunks, beginning
    at the largest base (or ``start`` if that is later) and ending with the
    smallest ``next_index``. Nothing is yielded when the ranges do not
    overlap.
    """

    chunks = list(chunks)
    if not chunks:
        return

    common = max(chunk.base for chunk in chunks)
    if start is not None and start > common:
        common = start
    end = min(chunk.next_index for chunk in chunks)

    iterators = [chunk.iter_along_base(common) for chunk in chunks]
    for index in range(common, end):
        yield index, tuple(next(iterator)[1] for iterator in iterators)
