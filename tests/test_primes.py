"""End-to-end tests for the prime generators."""

from __future__ import annotations

import itertools

import pytest

import lazy_wheel_sieve as lws

FIRST_20 = [2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59, 61, 67, 71]


def eratosthenes(bound: int) -> list:
    flags = bytearray([1]) * bound
    flags[0:2] = b"\x00\x00"
    for n in range(2, int(bound ** 0.5) + 1):
        if flags[n]:
            flags[n * n::n] = bytearray(len(range(n * n, bound, n)))
    return [n for n in range(bound) if flags[n]]


def test_first_twenty_primes() -> None:
    assert list(itertools.islice(lws.primes(), 20)) == FIRST_20


def test_first_ten_thousand_are_increasing_and_prime() -> None:
    found = list(itertools.islice(lws.primes(), 10000))

    assert len(set(found)) == 10000
    assert all(a < b for a, b in zip(found, found[1:]))
    assert all(lws.smallest_divisor(p) == p for p in found)
    assert found[-1] == 104729


def test_every_prime_below_bound_appears_once() -> None:
    bound = 100000
    expected = eratosthenes(bound)

    found = list(itertools.takewhile(lambda p: p < bound, lws.primes()))

    assert found == expected


@pytest.mark.parametrize("wheel_size", range(6))
def test_wheel_size_does_not_change_output(wheel_size: int) -> None:
    smaller = list(itertools.islice(lws.wheel_sieve(wheel_size), 3000))
    larger = list(itertools.islice(lws.wheel_sieve(wheel_size + 1), 3000))

    assert smaller == larger


@pytest.mark.parametrize("wheel_size", [0, 1, 2, 4])
def test_small_prefixes_for_each_wheel(wheel_size: int) -> None:
    assert list(itertools.islice(lws.wheel_sieve(wheel_size), 20)) == FIRST_20


def test_generators_are_independent() -> None:
    first = lws.primes()
    second = lws.primes()

    assert list(itertools.islice(first, 5)) == [2, 3, 5, 7, 11]
    assert next(second) == 2
    assert next(first) == 13


def test_wheel_sieve_fails_fast_on_negative_size() -> None:
    with pytest.raises(ValueError):
        lws.wheel_sieve(-1)


def test_shared_primes_memoizes(monkeypatch) -> None:
    monkeypatch.setattr(lws, "_SHARED_PRIMES", None)

    shared = lws.shared_primes()

    assert shared is lws.shared_primes()
    assert shared.known == 0
    assert shared[100] == 547
    assert shared.known == 101
    assert shared[0] == 2
    assert shared.known == 101
    assert shared.take(20) == FIRST_20
    assert list(itertools.islice(shared, 20)) == FIRST_20


def test_shared_primes_rejects_negative_index() -> None:
    with pytest.raises(IndexError):
        lws.SharedPrimes(2)[-1]


def test_validate_primes_reports_no_failures(capsys) -> None:
    passed, failed = lws.validate_primes(500, 3)

    assert (passed, failed) == (500, 0)
    assert "Passed: 500, Failed: 0" in capsys.readouterr().out
