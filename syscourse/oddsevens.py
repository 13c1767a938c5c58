"""Odd/even coordination of threads incrementing one shared counter.

Even workers may only increment the counter while it is even and odd
workers only while it is odd, so the counter advances in strict
alternation. The strategies differ in how a worker waits for its turn:
spinning on the lock, checking before taking the lock (once or twice),
one condition variable broadcast to everyone, or a separate condition
variable for each parity.
"""

from __future__ import annotations

import argparse
import enum
import sys
import threading
import time
from typing import Callable, Sequence, TextIO

NUM_THREADS = 2
THREAD_ITERS = 5
DEFAULT_DELAY = 1e-6


class Strategy(enum.Enum):
    """How a worker waits until the counter has the parity it needs."""

    BUSY = "busy"
    NESTED_IF = "nested_if"
    TRIPLE_IF = "triple_if"
    CONDVAR = "condvar"
    TWO_CONDVARS = "two_condvars"


_LABELS = {0: "EVEN", 1: "ODD"}


class OddsEvensCounter:
    """A shared counter plus the workers that advance it."""

    def __init__(
        self,
        strategy: Strategy = Strategy.CONDVAR,
        iters: int = THREAD_ITERS,
        verbose: bool = True,
        delay: float = DEFAULT_DELAY,
        out: TextIO | None = None,
    ) -> None:
        if iters < 0:
            raise ValueError(f"iters must not be negative, got {iters}")
        if delay < 0:
            raise ValueError(f"delay must not be negative, got {delay}")
        self.strategy = Strategy(strategy)
        self.iters = iters
        self.verbose = verbose
        self.delay = delay
        self.out = out
        self.count = 0
        self._lock = threading.Lock()
        self._any_change = threading.Condition(self._lock)
        self._turn = {
            0: threading.Condition(self._lock),
            1: threading.Condition(self._lock),
        }
        self._out_lock = threading.Lock()

    def _emit(self, text: str) -> None:
        with self._out_lock:
            print(text, file=self.out if self.out is not None else sys.stdout)

    def _note(self, text: str) -> None:
        if self.verbose:
            self._emit(text)

    def _update(self) -> None:
        """Increment the counter; the caller holds the lock."""
        self.count += 1
        if self.delay:
            time.sleep(self.delay)

    def _proceed(self, tid: int, i: int, parity: int) -> None:
        self._emit(f"{tid} iter {i}: count {self.count}, IS {_LABELS[parity]}, proceeding")
        self._update()

    def _busy(self, tid: int, parity: int) -> None:
        label = _LABELS[parity]
        i = 0
        while i < self.iters:
            with self._lock:
                turn = self.count % 2 == parity
                if turn:
                    self._proceed(tid, i, parity)
                    i += 1
                else:
                    self._note(f"{tid} iter {i}: count {self.count}, NOT {label}")
            if not turn:
                time.sleep(0)

    def _checked(self, tid: int, parity: int, checks: int) -> None:
        label = _LABELS[parity]
        i = 0
        while i < self.iters:
            if all(self.count % 2 == parity for _ in range(checks)):
                with self._lock:
                    if self.count % 2 == parity:
                        self._proceed(tid, i, parity)
                        i += 1
                        continue
                    self._note(f"{tid} iter {i}: count {self.count}, LOCKED NOT {label}")
            else:
                self._note(f"{tid} iter {i}: count {self.count}, NOT LOCKED NOT {label}")
            time.sleep(0)

    def _condvar(self, tid: int, parity: int) -> None:
        label = _LABELS[parity]
        for i in range(self.iters):
            with self._any_change:
                while self.count % 2 != parity:
                    self._note(f"{tid} iter {i}: count {self.count}, NOT {label}, sleeping")
                    self._any_change.wait()
                self._proceed(tid, i, parity)
                self._any_change.notify_all()

    def _two_condvars(self, tid: int, parity: int) -> None:
        label = _LABELS[parity]
        mine = self._turn[parity]
        theirs = self._turn[1 - parity]
        for i in range(self.iters):
            with mine:
                while self.count % 2 != parity:
                    self._note(f"{tid} iter {i}: count {self.count}, NOT {label}, sleeping")
                    mine.wait()
                self._proceed(tid, i, parity)
                theirs.notify()

    def _work(self, tid: int, parity: int) -> None:
        if self.strategy is Strategy.BUSY:
            self._busy(tid, parity)
        elif self.strategy is Strategy.NESTED_IF:
            self._checked(tid, parity, checks=1)
        elif self.strategy is Strategy.TRIPLE_IF:
            self._checked(tid, parity, checks=2)
        elif self.strategy is Strategy.CONDVAR:
            self._condvar(tid, parity)
        else:
            self._two_condvars(tid, parity)
        self._emit(f"{tid} FINISHED {self.iters} iterations")

    def even_work(self, tid: int) -> None:
        """Increment the counter iters times, each time while it is even."""
        self._work(tid, 0)

    def odd_work(self, tid: int) -> None:
        """Increment the counter iters times, each time while it is odd."""
        self._work(tid, 1)

    def run(self, num_threads: int = NUM_THREADS) -> int:
        """Start num_threads even and num_threads odd workers; return the final count."""
        if num_threads < 0:
            raise ValueError(f"num_threads must not be negative, got {num_threads}")
        targets: list[Callable[[int], None]] = [self.even_work, self.odd_work]
        threads = [
            threading.Thread(target=targets[tid % 2], args=(tid,))
            for tid in range(2 * num_threads)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self._emit(f"main: count is {self.count}")
        return self.count


def run(
    strategy: Strategy = Strategy.CONDVAR,
    num_threads: int = NUM_THREADS,
    iters: int = THREAD_ITERS,
    verbose: bool = True,
    out: TextIO | None = None,
) -> int:
    """Run one odd/even session and return the final counter value."""
    counter = OddsEvensCounter(strategy, iters=iters, verbose=verbose, out=out)
    return counter.run(num_threads)


def main(argv: Sequence[str] | None = None) -> int:
    """Command line entry: oddsevens [--strategy S] [--threads N] [--iters K] [--quiet]."""
    parser = argparse.ArgumentParser(
        prog="oddsevens", description="Coordinate odd and even threads on one counter."
    )
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in Strategy],
        default=Strategy.CONDVAR.value,
    )
    parser.add_argument("--threads", type=int, default=NUM_THREADS)
    parser.add_argument("--iters", type=int, default=THREAD_ITERS)
    parser.add_argument("--quiet", action="store_true", help="omit waiting messages")
    args = parser.parse_args(argv)
    try:
        run(Strategy(args.strategy), args.threads, args.iters, not args.quiet)
    except ValueError as exc:
        parser.error(str(exc))
    return 0