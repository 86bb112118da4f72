#!/usr/bin/python3
# LazyWheelSieve: An Unbounded, Lazy Wheel Sieve of Primes
# Copyright (C) 2025 Brian Cameron and OpenAI
#
# Usage:
# lazy_wheel_sieve.py -d -l -p -r -v -n COUNT -k WHEEL
# -d       : Enable debug messages.
# -l       : List every generated prime, not just the largest.
# -p       : Generate profiling report for the run.
# -r       : Generate wheel and prime gap reports in the directory
#            wheelsieve-reports-## where the number is the wheel size.
# -v       : Run validation functions.
# -n COUNT : Number of primes to generate (default PRIME_COUNT).
# -k WHEEL : Number of primes canceled by the wheel
#            (default DEFAULT_WHEEL_SIZE).
#
# ---
"""
This module implements a lazy wheel sieve, producing the prime numbers in
increasing order without any upper bound.

It combines the wheel of Runciman's lazy wheel sieve with the incremental
composite queue of O'Neil's genuine sieve of Eratosthenes:

- **Wheel**: a repeating cycle of gaps ("spokes") that steps over every
  multiple of the first few primes, so those candidates are never tested.
- **Composite streams**: each discovered prime p contributes the stream of
  p × q for every wheel candidate q >= p. A candidate is prime exactly when
  it is smaller than the smallest pending composite.
- **Pairing heap**: composite streams are kept ordered by their next value in
  a persistent pairing heap, fed lazily from a second, recomputed copy of the
  sieve so that a stream is only admitted once its prime's square is near.

Nothing is computed until the consumer asks for the next prime, and a
consumer that stops pulling needs no teardown.
"""
import os
import sys
import cProfile
import pstats
import io
import time
import csv
import math
import itertools
from collections import defaultdict, namedtuple

DEFAULT_WHEEL_SIZE = 6
PRIME_COUNT = 1000

DEBUG_MODE = "-d" in sys.argv
PROFILE_MODE = "-p" in sys.argv

def debug(msg, *args):
    """
    Helper function to print debug.
    """
    print("[DEBUG]", msg, *args)

class Stream:
    """
    Node of an infinite, singly linked, lazily forced sequence.

    The head is always present.  The tail is produced by calling the thunk
    the first time it is needed and is then kept on this node, so holders of
    the same node share it.  Holders of different nodes created by separate
    calls never share anything, which keeps consumers that advance at
    different speeds from pinning each other's prefixes.
    """
    __slots__ = ("head", "_tail", "_thunk")

    def __init__(self, head, thunk=None):
        self.head = head
        self._tail = None
        self._thunk = thunk

    @property
    def tail(self):
        if self._thunk is not None:
            self._tail = self._thunk()
            self._thunk = None
        return self._tail

    def map(self, func):
        """
        Lazily apply func to every element.
        """
        return Stream(func(self.head), lambda: self.tail.map(func))

    def take(self, count):
        """
        Return the first count heads as a list.
        """
        return list(itertools.islice(self, count))

    def __iter__(self):
        # The walker only holds its current node, so a long iteration does
        # not keep the whole forced prefix alive through this one.
        return _walk(self)

    def __repr__(self):
        return f"Stream({self.head}, ...)"

def _walk(node):
    while True:
        yield node.head
        node = node.tail

def cyclic(seed):
    """
    Build a stream that repeats the finite, non-empty seed forever.

    The stream is a real ring: the last node's tail is the first node, so
    stepping through it never allocates.
    """
    nodes = [Stream(value) for value in seed]
    if not nodes:
        raise ValueError("cyclic stream needs a non-empty seed")

    # Link the ring.
    for node, following in zip(nodes, nodes[1:] + nodes[:1]):
        node._tail = following

    return nodes[0]

def spin(start, increments):
    """
    Return start, start + i0, start + i0 + i1, ... for increments i0, i1, ...

    Every call builds a fresh chain.  This is used for the wheel's raw
    candidates, and, scaled by a prime, for that prime's composites.
    """
    return Stream(start, lambda: spin(start + increments.head, increments.tail))

Wheel = namedtuple("Wheel", ["primes", "spokes"])

def advance_wheel(wheel):
    """
    Grow the wheel by one prime.

    The current head prime p is the first candidate of the current spokes.
    The next prime is the following candidate, p + spokes[0].  Starting
    there, the old cycle is walked for one full new period (the product of
    all current primes) and every position that is a multiple of p is
    canceled by merging the spoke that lands on it with the spoke after it.

    For example:
        Wheel([3, 2], [2])          -> Wheel([5, 3, 2], [2, 4])
        Wheel([5, 3, 2], [2, 4])    -> Wheel([7, 5, 3, 2], [4, 2, 4, 2, 4, 6, 2, 6])
    """
    primes, spokes = wheel
    p = primes[0]
    period = math.prod(primes)

    turns = itertools.cycle(spokes)
    next_prime = p + next(turns)

    new_spokes = []
    position = next_prime
    while period > 0:
        spoke = next(turns)
        while (position + spoke) % p == 0:
            spoke += next(turns)
        new_spokes.append(spoke)
        position += spoke
        period -= spoke

    if DEBUG_MODE:
        debug(f"Wheel: canceled {p}, next prime {next_prime}, "
              f"{len(new_spokes)} spokes")

    return Wheel([next_prime] + primes, new_spokes)

def build_wheel(wheel_size):
    """
    Build the wheel that cancels the multiples of the first wheel_size
    primes.  The head of the returned primes list is the first prime the
    wheel does not cancel.

        build_wheel(0) == ([2], [1])
        build_wheel(1) == ([3, 2], [2])
        build_wheel(2) == ([5, 3, 2], [2, 4])
        build_wheel(3) == ([7, 5, 3, 2], [4, 2, 4, 2, 4, 6, 2, 6])

    Raises:
        ValueError if wheel_size is not a non-negative integer.
    """
    if not isinstance(wheel_size, int) or wheel_size < 0:
        raise ValueError(f"Invalid wheel size {wheel_size!r} "
                         "(must be a non-negative integer)")

    wheel = Wheel([2], [1])
    for _ in range(wheel_size):
        wheel = advance_wheel(wheel)
    return wheel

class HeapNode:
    """
    Node of a persistent pairing heap of streams, ordered by stream head.

    Children are kept as a cons list of (HeapNode, rest) pairs ending in
    None, so merging never copies or mutates an existing node.  The empty
    heap is None.
    """
    __slots__ = ("stream", "children")

    def __init__(self, stream, children=None):
        self.stream = stream
        self.children = children

def merge(left, right):
    """
    Merge two heaps.  The root with the smaller head adopts the other heap
    as its first child; ties go to the left.
    """
    if left is None:
        return right
    if right is None:
        return left
    if left.stream.head <= right.stream.head:
        return HeapNode(left.stream, (right, left.children))
    return HeapNode(right.stream, (left, right.children))

def insert(stream, heap):
    return merge(HeapNode(stream), heap)

def extract_min(heap):
    """
    Return (stream with the smallest head, remaining heap).

    Raises:
        IndexError if the heap is empty.
    """
    if heap is None:
        raise IndexError("extract_min from an empty merge queue")
    return heap.stream, merge_pairs(heap.children)

def merge_pairs(children):
    """
    Standard two-pass pairing heap merge: merge the children two at a time
    left to right, then fold the partial results together from the right.
    """
    paired = []
    while children is not None:
        first, children = children
        if children is None:
            paired.append(first)
            break
        second, children = children
        paired.append(merge(first, second))

    merged = None
    for heap in reversed(paired):
        merged = merge(heap, merged)
    return merged

def heap_size(heap):
    """
    Count the streams held by a heap.
    """
    count = 0
    pending = [heap] if heap is not None else []
    while pending:
        node = pending.pop()
        count += 1
        children = node.children
        while children is not None:
            child, children = children
            pending.append(child)
    return count

def composites(stream):
    """
    Scale a stream that starts with a prime by that prime.  Applied to
    spin(p, ns) this gives p*p followed by the wheel-filtered multiples
    of p.
    """
    factor = stream.head
    return stream.map(lambda n: factor * n)

class CompositeFrontier:
    """
    All composites known so far: a merge queue of composite streams plus a
    feeder of streams not yet admitted.

    The feeder entry after the admitted ones is held as pending, so its head
    can be compared with the queue without admitting it.  A stream only
    enters the queue once its head is the smallest composite, or when the
    queue has run dry, which keeps streams for large primes out of memory
    until they matter.
    """
    def __init__(self, feeder):
        self.queue = None
        self.admitted = 0
        self._feeder = feeder
        self._pending = next(feeder)

    def _admit(self):
        stream = self._pending
        self._pending = next(self._feeder)
        self.admitted += 1
        if DEBUG_MODE:
            debug(f"Frontier: admitted composites from {stream.head}, "
                  f"{self.admitted} streams admitted")
        return stream

    def peek(self):
        """
        Return the smallest composite without consuming it.
        """
        pending = self._pending.head
        if self.queue is None or pending < self.queue.stream.head:
            return pending
        return self.queue.stream.head

    def _split(self):
        if self.queue is None:
            self.queue = insert(self._admit(), None)

        if self._pending.head < self.queue.stream.head:
            stream = self._admit()
        else:
            stream, self.queue = extract_min(self.queue)

        self.queue = insert(stream.tail, self.queue)
        return stream.head

    def pop(self):
        """
        Consume and return the smallest composite.  Copies of the same
        value reached through other primes (15 as 3×5 and 5×3) are
        consumed with it, so each composite is returned once.
        """
        value = self._split()
        while self.peek() == value:
            self._split()
        return value

class CompositeEngine:
    """
    Iterator over emitted streams spin(prime, ns), one per prime found,
    starting with the prime it was built with.

    Candidates come from spinning the wheel spokes.  Each step compares the
    current candidate with the smallest pending composite:

      - equal:   the candidate is composite; consume both.
      - smaller: the candidate is prime; emit its stream.
      - larger:  the composite is stale; consume it and retry.

    The composite streams are fed by a second, independently computed
    engine over the same wheel rather than by this engine's own output, so
    the two sequences never share nodes while they advance at very
    different rates.  That engine is only created when its first prime is
    needed, and feeds its own feeder the same way.
    """
    def __init__(self, prime, spokes, depth=0):
        self.prime = prime
        self.spokes = spokes
        self.depth = depth
        self.cand = None
        self.increments = None
        self.frontier = None

    def _feed(self):
        yield composites(spin(self.prime, self.spokes))

        if DEBUG_MODE:
            debug(f"Engine {self.depth}: starting feeder engine "
                  f"{self.depth + 1}")

        feeder = CompositeEngine(self.prime, self.spokes, self.depth + 1)
        # Its first prime was just fed above.
        next(feeder)
        for stream in feeder:
            yield composites(stream)

    def _advance(self):
        self.cand += self.increments.head
        self.increments = self.increments.tail

    def step(self):
        """
        Perform one comparison.  Returns the emitted stream when the
        candidate was prime and None otherwise.
        """
        if self.frontier is None:
            self.frontier = CompositeFrontier(self._feed())
            self.cand = self.prime
            self.increments = self.spokes
            emitted = spin(self.cand, self.increments)
            self._advance()
            return emitted

        comp = self.frontier.peek()
        cand = self.cand
        if cand < comp:
            emitted = spin(cand, self.increments)
            self._advance()
            return emitted

        self.frontier.pop()
        if cand == comp:
            self._advance()
        return None

    def __iter__(self):
        return self

    def __next__(self):
        while True:
            emitted = self.step()
            if emitted is not None:
                return emitted

def wheel_sieve(wheel_size):
    """
    Return an unbounded generator of the primes, sieving with a wheel that
    cancels the multiples of the first wheel_size primes.

    The wheel size only changes speed and memory, never the output.  Small
    sizes are best; 6 is a good value, and larger wheels grow with the
    product of their primes.

    Raises:
        ValueError (immediately, not on first use) if wheel_size is not a
        non-negative integer.
    """
    return _sieve_primes(build_wheel(wheel_size))

def _sieve_primes(wheel):
    # The wheel's own primes, smallest first.
    yield from reversed(wheel.primes[1:])

    engine = CompositeEngine(wheel.primes[0], cyclic(wheel.spokes))
    for stream in engine:
        yield stream.head

def primes():
    """
    Return a fresh, unbounded generator of the primes using the default
    wheel.
    """
    return wheel_sieve(DEFAULT_WHEEL_SIZE)

class SharedPrimes:
    """
    Memoizing, indexable view over a single prime generator.

    Every prime ever requested stays cached for the life of the object, so
    this only pays off for callers that revisit primes many times.  Plain
    iteration over primes() or wheel_sieve() holds nothing.
    """
    def __init__(self, wheel_size=DEFAULT_WHEEL_SIZE):
        self.wheel_size = wheel_size
        self._source = wheel_sieve(wheel_size)
        self._cache = []

    def _fill(self, count):
        while len(self._cache) < count:
            self._cache.append(next(self._source))

    def __getitem__(self, index):
        if index < 0:
            raise IndexError("negative index into an unbounded prime sequence")
        self._fill(index + 1)
        return self._cache[index]

    def __iter__(self):
        for index in itertools.count():
            yield self[index]

    def take(self, count):
        self._fill(count)
        return self._cache[:count]

    @property
    def known(self):
        return len(self._cache)

_SHARED_PRIMES = None

def shared_primes():
    """
    Return the process-wide SharedPrimes over the default wheel, creating
    it on first use.
    """
    global _SHARED_PRIMES
    if _SHARED_PRIMES is None:
        _SHARED_PRIMES = SharedPrimes(DEFAULT_WHEEL_SIZE)
    return _SHARED_PRIMES

def smallest_divisor(n):
    """
    Trial division, independent of the sieve.  Returns n for primes.
    """
    for d in range(2, math.isqrt(n) + 1):
        if n % d == 0:
            return d
    return n

def validate_wheel(wheel_size):
    """
    Check that one period of the wheel visits exactly the integers coprime
    to the canceled primes, in order, starting from the wheel's head prime.
    """
    print(f"Testing wheel {wheel_size} for correctness...")
    passed = 0
    failed = 0

    wheel = build_wheel(wheel_size)
    start = wheel.primes[0]
    period = math.prod(wheel.primes[1:])

    if sum(wheel.spokes) != period:
        print(f"FAIL: spokes span {sum(wheel.spokes)} (expected {period})")
        failed += 1
    else:
        passed += 1

    expected = [n for n in range(start, start + period)
                if math.gcd(n, period) == 1]
    actual = spin(start, cyclic(wheel.spokes)).take(len(expected))
    for want, got in zip(expected, actual):
        if want != got:
            print(f"FAIL: wheel candidate {got} (expected {want})")
            failed += 1
        else:
            passed += 1

    if len(wheel.spokes) != len(expected):
        print(f"FAIL: {len(wheel.spokes)} spokes "
              f"(expected {len(expected)})")
        failed += 1
    else:
        passed += 1

    print(f"Test complete. Passed: {passed}, Failed: {failed}")
    return passed, failed

def validate_primes(count, wheel_size=DEFAULT_WHEEL_SIZE):
    """
    Validate the first count generated primes.

    Each value must be prime by trial division, strictly above the one
    before, and every integer strictly between two neighbours must be
    composite, so no prime was skipped.
    """
    print(f"\nValidating the first {count} primes from wheel {wheel_size}...")
    passed = 0
    failed = 0

    previous = 1
    for p in itertools.islice(wheel_sieve(wheel_size), count):
        if p <= previous:
            print(f"FAIL: {p} follows {previous} (not increasing)")
            failed += 1
            continue

        if smallest_divisor(p) != p:
            print(f"FAIL: {p} has divisor {smallest_divisor(p)}")
            failed += 1
        else:
            passed += 1

        for n in range(previous + 1, p):
            if smallest_divisor(n) == n:
                print(f"FAIL: prime {n} skipped between {previous} and {p}")
                failed += 1

        previous = p

    print(f"\nValidation complete. Passed: {passed}, Failed: {failed}\n")
    return passed, failed

def generate_wheel_report(output_dir, max_wheel):
    """
    Write one CSV row per wheel size 0..max_wheel describing the wheel:
    the primes it cancels, its period, how many spokes it has, the share of
    integers left as candidates, and its smallest and largest gap.

    Returns:
        output_path (str): The path to the written CSV file
    """
    output_path = os.path.join(output_dir, f"wheel-report-{max_wheel:02d}.csv")
    fieldnames = [
        "wheel_size", "first_prime", "canceled_primes", "period",
        "spokes", "candidate_density", "min_gap", "max_gap"
    ]

    rows = []
    for wheel_size in range(max_wheel + 1):
        start_time = time.time()
        wheel = build_wheel(wheel_size)
        period = sum(wheel.spokes)
        rows.append({
            "wheel_size": wheel_size,
            "first_prime": wheel.primes[0],
            "canceled_primes": " ".join(str(p) for p in reversed(wheel.primes[1:])),
            "period": period,
            "spokes": len(wheel.spokes),
            "candidate_density": len(wheel.spokes) / period,
            "min_gap": min(wheel.spokes),
            "max_gap": max(wheel.spokes),
        })
        if DEBUG_MODE:
            elapsed = time.time() - start_time
            debug(f"Report: wheel {wheel_size} built in {elapsed:.3f} seconds")

    os.makedirs(output_dir, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)

    return output_path

def generate_gap_report(output_dir, count, wheel_size=DEFAULT_WHEEL_SIZE):
    """
    Lightweight histogram of the gaps between the first count primes.

    Output: a CSV file with one row per gap size:
        - gap: difference between consecutive primes
        - count: how many times it occurs
        - first_prime: the first prime followed by that gap

    Returns:
        output_path (str): The path to the written CSV file
    """
    output_path = os.path.join(output_dir, f"gap-report-{count}.csv")

    count_by_gap = defaultdict(int)
    first_by_gap = {}
    previous = None
    for p in itertools.islice(wheel_sieve(wheel_size), count):
        if previous is not None:
            gap = p - previous
            count_by_gap[gap] += 1
            first_by_gap.setdefault(gap, previous)
        previous = p

    os.makedirs(output_dir, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["gap", "count", "first_prime"])
        for gap in sorted(count_by_gap):
            writer.writerow([gap, count_by_gap[gap], first_by_gap[gap]])

    return output_path

def _flag_value(argv, flag, default, minimum):
    """
    Return the integer following flag in argv, or default if absent.
    """
    if flag not in argv:
        return default

    index = argv.index(flag)
    try:
        value = int(argv[index + 1])
    except (IndexError, ValueError):
        sys.exit(f"{flag} needs an integer argument")
    if value < minimum:
        sys.exit(f"{flag} must be at least {minimum}, got {value}")
    return value

def main(argv=None):
    global DEBUG_MODE

    if argv is None:
        argv = sys.argv[1:]
    if "-d" in argv:
        DEBUG_MODE = True
    verbose = "-v" in argv or DEBUG_MODE

    count = _flag_value(argv, "-n", PRIME_COUNT, 1)
    wheel_size = _flag_value(argv, "-k", DEFAULT_WHEEL_SIZE, 0)

    print("\nBuilding wheel...")
    start_time = time.time()
    wheel = build_wheel(wheel_size)
    elapsed = time.time() - start_time
    print(f"- Wheel {wheel_size} constructed in {elapsed:.3f} seconds: "
          f"{len(wheel.spokes)} spokes over a period of {sum(wheel.spokes)}")

    start_time = time.time()
    found = list(itertools.islice(wheel_sieve(wheel_size), count))
    elapsed = time.time() - start_time
    print(f"- Generated {count} primes in {elapsed:.3f} seconds, "
          f"largest {found[-1]}\n")

    if "-l" in argv:
        for p in found:
            print(p)
        print("")

    if verbose:
        validate_wheel(wheel_size)
        validate_primes(count, wheel_size)

    if "-r" in argv:
        output_dir = f"wheelsieve-reports-{wheel_size:02d}"
        for output_path in (generate_wheel_report(output_dir, wheel_size),
                            generate_gap_report(output_dir, count, wheel_size)):
            print(f"- Written to: {output_path}")
        print("")

def run():
    if PROFILE_MODE:
        profiler = cProfile.Profile()
        profiler.enable()
        main()
        profiler.disable()
        s = io.StringIO()
        ps = pstats.Stats(profiler, stream=s).sort_stats(pstats.SortKey.CUMULATIVE)
        ps.print_stats()
        print("\n--- PROFILER OUTPUT ---")
        print(s.getvalue())
    else:
        main()

if __name__ == "__main__":
    run()
