"""Tests for the persistent pairing heap of streams."""

from __future__ import annotations

import heapq
import random

import pytest

import lazy_wheel_sieve as lws


def arithmetic(start: int, step: int) -> lws.Stream:
    return lws.spin(start, lws.cyclic([step]))


def drain_heads(heap) -> list:
    heads = []
    while heap is not None:
        stream, heap = lws.extract_min(heap)
        heads.append(stream.head)
    return heads


def test_merge_with_empty_returns_other() -> None:
    heap = lws.insert(arithmetic(4, 2), None)

    assert lws.merge(None, heap) is heap
    assert lws.merge(heap, None) is heap
    assert lws.merge(None, None) is None


def test_extract_min_on_empty_queue_raises() -> None:
    with pytest.raises(IndexError):
        lws.extract_min(None)


def test_extract_min_returns_heads_in_order() -> None:
    heap = None
    for start in [49, 9, 25, 121, 4, 81]:
        heap = lws.insert(arithmetic(start, 1), heap)

    assert lws.heap_size(heap) == 6
    assert drain_heads(heap) == [4, 9, 25, 49, 81, 121]


def test_extraction_is_non_destructive() -> None:
    heap = None
    for start in [10, 3, 7, 5]:
        heap = lws.insert(arithmetic(start, 2), heap)

    stream, rest = lws.extract_min(heap)

    assert stream.head == 3
    assert drain_heads(rest) == [5, 7, 10]
    assert drain_heads(heap) == [3, 5, 7, 10]
    assert stream.take(3) == [3, 5, 7]


def test_ties_keep_both_streams() -> None:
    heap = lws.insert(arithmetic(15, 6), lws.insert(arithmetic(15, 10), None))

    first, heap = lws.extract_min(heap)
    second, heap = lws.extract_min(heap)

    assert first.head == second.head == 15
    assert heap is None


def test_merge_pairs_handles_many_children() -> None:
    heap = lws.insert(arithmetic(0, 1), None)
    for start in range(5000, 0, -1):
        heap = lws.merge(heap, lws.insert(arithmetic(start, 1), None))

    assert lws.heap_size(heap) == 5001
    stream, heap = lws.extract_min(heap)
    assert stream.head == 0
    assert lws.extract_min(heap)[0].head == 1


@pytest.mark.parametrize("seed", range(8))
def test_random_interleaving_matches_reference(seed: int) -> None:
    rng = random.Random(seed)
    heap = None
    model = []
    serial = 0

    for _ in range(600):
        if model and rng.random() < 0.45:
            stream, heap = lws.extract_min(heap)
            expected = heapq.heappop(model)
            assert stream.head == expected[0]
            if rng.random() < 0.5:
                # Advance the stream and put it back, as the frontier does.
                heap = lws.insert(stream.tail, heap)
                serial += 1
                heapq.heappush(model, (stream.tail.head, serial))
        else:
            start = rng.randrange(1000)
            step = rng.randrange(1, 20)
            heap = lws.insert(arithmetic(start, step), heap)
            serial += 1
            heapq.heappush(model, (start, serial))

        assert lws.heap_size(heap) == len(model)

    assert drain_heads(heap) == [head for head, _ in sorted(model)]
