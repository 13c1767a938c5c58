"""Monte Carlo estimation of pi with the C library's random number generators.

Points are drawn in the unit square and counted as hits when they fall
inside the quarter circle of radius one; four times the hit ratio
approximates pi. Both generators reproduce the glibc sequences exactly,
so a given seed always yields the same count.
"""

from __future__ import annotations

import enum
import math
import sys
import threading
from collections import deque
from dataclasses import dataclass
from typing import Callable, Iterator, Sequence

RAND_MAX = 2147483647
DEFAULT_SEED = 123456789
DEFAULT_THREADS = 4

_MASK32 = 0xFFFFFFFF
_DEGREE = 31
_SEPARATION = 3
_DISCARD = 310


def _to_int32(value: int) -> int:
    value &= _MASK32
    return value - (1 << 32) if value & 0x80000000 else value


def _park_miller(word: int) -> int:
    """One step of the seeding recurrence, with C's truncating division."""
    hi, lo = divmod(abs(word), 127773)
    if word < 0:
        hi, lo = -hi, -lo
    word = 16807 * lo - 2836 * hi
    if word < 0:
        word += 2147483647
    return word


class GlibcRandom:
    """The additive feedback generator behind glibc's srand() and rand()."""

    def __init__(self, seed: int = 1) -> None:
        word = _to_int32(seed)
        if word == 0:
            word = 1
        words = [word]
        for _ in range(_DEGREE - 1):
            words.append(_park_miller(words[-1]))
        words = [w & _MASK32 for w in words]
        self._history: deque[int] = deque(
            words + words[:_SEPARATION], maxlen=_DEGREE + _SEPARATION
        )
        for _ in range(_DISCARD):
            self._advance()

    def _advance(self) -> int:
        value = (self._history[-_DEGREE] + self._history[-_SEPARATION]) & _MASK32
        self._history.append(value)
        return value

    def rand(self) -> int:
        """Return the next value in the range [0, RAND_MAX]."""
        return self._advance() >> 1

    def __iter__(self) -> Iterator[int]:
        while True:
            yield self.rand()


def rand_r(state: int) -> tuple[int, int]:
    """Reentrant generator: return (value, next_state) for the given state."""
    state &= _MASK32

    def step(s: int) -> int:
        return (s * 1103515245 + 12345) & _MASK32

    state = step(state)
    result = (state // 65536) % 2048
    state = step(state)
    result = (result << 10) ^ ((state // 65536) % 1024)
    state = step(state)
    result = (result << 10) ^ ((state // 65536) % 1024)
    return result, state


def _rand_r_stream(state: int) -> Iterator[int]:
    while True:
        value, state = rand_r(state)
        yield value


@dataclass(frozen=True)
class PiEstimate:
    """Outcome of a sampling run."""

    npoints: int
    hits: int

    @property
    def pi_est(self) -> float:
        if self.npoints == 0:
            return math.nan
        return self.hits / self.npoints * 4.0


class HitCounting(enum.Enum):
    """How worker threads add their hits to the shared total."""

    UNSYNCHRONIZED = "unsynchronized"
    LOCKED = "locked"
    LOCAL = "local"


def _samples(npoints: int, next_value: Callable[[], int]) -> Iterator[bool]:
    """Yield for each sample point whether it lands inside the quarter circle."""
    for _ in range(npoints):
        x = next_value() / RAND_MAX
        y = next_value() / RAND_MAX
        yield x * x + y * y <= 1.0


def estimate_pi(npoints: int, seed: int = DEFAULT_SEED, use_rand: bool = False) -> PiEstimate:
    """Estimate pi from npoints samples on one thread.

    With use_rand the seeded srand()/rand() sequence is used, otherwise
    rand_r() starting from seed.
    """
    if use_rand:
        next_value = GlibcRandom(seed).rand
    else:
        next_value = _rand_r_stream(seed).__next__
    hits = sum(_samples(npoints, next_value))
    return PiEstimate(npoints, hits)


class _Tally:
    def __init__(self) -> None:
        self.hits = 0
        self.lock = threading.Lock()


def _worker(thread_id: int, points: int, tally: _Tally, counting: HitCounting) -> None:
    samples = _samples(points, _rand_r_stream(DEFAULT_SEED * thread_id).__next__)
    if counting is HitCounting.LOCAL:
        mine = sum(samples)
        with tally.lock:
            tally.hits += mine
    elif counting is HitCounting.LOCKED:
        for hit in samples:
            if hit:
                with tally.lock:
                    tally.hits += 1
    else:
        for hit in samples:
            if hit:
                current = tally.hits
                tally.hits = current + 1


def estimate_pi_threaded(
    npoints: int,
    num_threads: int = DEFAULT_THREADS,
    counting: HitCounting = HitCounting.LOCAL,
) -> PiEstimate:
    """Estimate pi with the samples split evenly over num_threads threads.

    Thread k (counting from 1) seeds its generator with 123456789 * k.
    Each thread takes npoints // num_threads points; the ratio is still
    taken over npoints. UNSYNCHRONIZED counting may lose updates.
    """
    if num_threads < 1:
        raise ValueError(f"num_threads must be at least 1, got {num_threads}")
    per_thread = abs(npoints) // num_threads
    if npoints < 0:
        per_thread = -per_thread
    tally = _Tally()
    threads = [
        threading.Thread(target=_worker, args=(tid, per_thread, tally, counting))
        for tid in range(1, num_threads + 1)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return PiEstimate(npoints, tally.hits)


def format_report(estimate: PiEstimate) -> str:
    """Render an estimate as the three-line report."""
    return (
        f"npoints: {estimate.npoints:8d}\n"
        f"hits:    {estimate.hits:8d}\n"
        f"pi_est:  {estimate.pi_est:f}"
    )


def _atoi(text: str) -> int:
    """Parse a leading integer the way atoi does, yielding 0 on garbage."""
    text = text.lstrip()
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    digits = ""
    for ch in text:
        if not ch.isdigit():
            break
        digits += ch
    return sign * int(digits) if digits else 0


_SAMPLES_HELP = "  num_samples: int, how many sample points to try, higher gets closer to pi"


def main(argv: Sequence[str] | None = None) -> int:
    """Single-threaded estimate: picalc [--rand] <num_samples>."""
    args = list(sys.argv[1:] if argv is None else argv)
    use_rand = "--rand" in args
    args = [a for a in args if a != "--rand"]
    if not args:
        print("usage: picalc <num_samples>")
        print(_SAMPLES_HELP)
        return 1
    print(format_report(estimate_pi(_atoi(args[0]), use_rand=use_rand)))
    return 0


def main_threaded(argv: Sequence[str] | None = None) -> int:
    """Threaded estimate: picalc_threads [--counting=MODE] <num_samples> [num_threads]."""
    args = []
    counting = HitCounting.LOCAL
    usage_error = False
    for arg in sys.argv[1:] if argv is None else argv:
        if arg.startswith("--counting="):
            try:
                counting = HitCounting(arg.split("=", 1)[1])
            except ValueError:
                usage_error = True
        else:
            args.append(arg)
    if usage_error or not args:
        print("usage: picalc_threads <num_samples> [num_threads]")
        print(_SAMPLES_HELP)
        print("  num_threads: int, number of threads to use for the computation, default 4")
        return -1
    npoints = _atoi(args[0])
    num_threads = _atoi(args[1]) if len(args) > 1 else DEFAULT_THREADS
    print(format_report(estimate_pi_threaded(npoints, num_threads, counting)))
    return 0