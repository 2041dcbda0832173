from __future__ import annotations

import pytest

from sample_chunks import AlignedChunkIterator, Chunk, iter_lockstep


def _chunk(values, pruned_to: int = 0) -> Chunk:
    chunk: Chunk = Chunk()
    for value in values:
        chunk.push(value)
    chunk.prune(pruned_to)
    return chunk


@pytest.mark.parametrize("pruned_to", [0, 2, 5, 9])
def test_forward_reversed_matches_backward(pruned_to: int) -> None:
    chunk = _chunk(range(8), pruned_to)

    forward = list(chunk.iter())
    backward = list(reversed(chunk.iter()))

    assert forward[::-1] == backward
    assert forward == [(index, index) for index in range(pruned_to, 8)]


def test_front_and_back_cursors_converge() -> None:
    it = _chunk("abcde").iter()

    assert len(it) == 5
    assert next(it) == (0, "a")
    assert it.next_back() == (4, "e")
    assert next(it) == (1, "b")
    assert it.next_back() == (3, "d")
    assert len(it) == 1
    assert next(it) == (2, "c")
    assert len(it) == 0

    with pytest.raises(StopIteration):
        it.next_back()
    with pytest.raises(StopIteration):
        next(it)


def test_reversed_drains_remaining_items() -> None:
    it = _chunk([1, 2, 3, 4]).iter()
    next(it)

    assert list(reversed(it)) == [(3, 4), (2, 3), (1, 2)]
    assert list(it) == []


def test_iterator_is_not_restartable() -> None:
    it = _chunk([1, 2]).iter()
    assert list(it) == [(0, 1), (1, 2)]
    assert list(it) == []


def test_mutation_invalidates_iterator() -> None:
    chunk = _chunk([1, 2, 3])
    it = chunk.iter()
    next(it)

    chunk.push(4)

    with pytest.raises(RuntimeError):
        next(it)


def test_shrink_does_not_invalidate_iterator() -> None:
    chunk = _chunk(range(6), 2)
    it = chunk.iter()
    next(it)

    chunk.shrink()

    assert list(it) == [(3, 3), (4, 4), (5, 5)]


@pytest.mark.parametrize("target", [-1, 0, 3, 4, 6, 9, 10, 50])
def test_iter_along_base_skips_up_to_target(target: int) -> None:
    chunk = _chunk(range(10), 4)

    pairs = list(chunk.iter_along_base(target))

    start = max(target, chunk.base)
    assert pairs == [(index, index) for index in range(start, 10)]


def test_iter_along_base_is_reversible() -> None:
    it = _chunk("abcdef", 1).iter_along_base(3)

    assert isinstance(it, AlignedChunkIterator)
    assert it.target == 3
    assert it.start == 3
    assert len(it) == 3
    assert list(reversed(it)) == [(5, "f"), (4, "e"), (3, "d")]


def test_iter_along_base_start_reports_base_when_target_is_older() -> None:
    it = _chunk("abcdef", 4).iter_along_base(1)
    assert it.start == 4
    assert list(it) == [(4, "e"), (5, "f")]


def test_lockstep_aligns_chunks_with_different_prune_history() -> None:
    fast = _chunk([f"f{i}" for i in range(10)], 6)
    slow = _chunk([f"s{i}" for i in range(9)], 2)

    rows = list(iter_lockstep([fast, slow]))

    assert rows == [
        (6, ("f6", "s6")),
        (7, ("f7", "s7")),
        (8, ("f8", "s8")),
    ]


def test_lockstep_honours_later_start() -> None:
    a = _chunk(range(5))
    b = _chunk(range(5), 1)

    assert list(iter_lockstep([a, b], start=3)) == [(3, (3, 3)), (4, (4, 4))]
    assert list(iter_lockstep([a, b], start=0)) == [(i, (i, i)) for i in range(1, 5)]


def test_lockstep_without_overlap_is_empty() -> None:
    a = _chunk(range(3))
    b = _chunk(range(3), 7)

    assert list(iter_lockstep([a, b])) == []
    assert list(iter_lockstep([])) == []
