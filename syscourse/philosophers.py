"""Dining philosophers: diners share utensils guarded by semaphores.

Each diner needs the utensils on both sides. All but the last pick up
the lower-numbered one first; the last diner reverses the order, which
rules out deadlock. Optionally every diner waits at the table until all
have arrived before the meal starts.
"""

from __future__ import annotations

import argparse
import sys
import threading
import time
from typing import Sequence, TextIO

from syscourse.picalc import GlibcRandom

N_PHILOSOPHERS = 5
MEALS_TO_FINISH = 10
MAX_DELAY = 50000


def utensil_order(n: int, n_philosophers: int = N_PHILOSOPHERS) -> tuple[int, int]:
    """Return the (first, second) utensils diner n picks up."""
    if not 0 <= n < n_philosophers:
        raise ValueError(f"philosopher {n} is not seated at a table of {n_philosophers}")
    if n == n_philosophers - 1:
        return 0, n
    return n, n + 1


class Diner:
    """A table of philosophers sharing one utensil between each neighbour pair."""

    def __init__(
        self,
        n_philosophers: int = N_PHILOSOPHERS,
        meals: int = MEALS_TO_FINISH,
        max_delay: int = MAX_DELAY,
        gate: bool = False,
        out: TextIO | None = None,
    ) -> None:
        if n_philosophers < 2:
            raise ValueError(f"need at least 2 philosophers, got {n_philosophers}")
        if meals < 0:
            raise ValueError(f"meals must not be negative, got {meals}")
        if max_delay < 0:
            raise ValueError(f"max_delay must not be negative, got {max_delay}")
        self.n_philosophers = n_philosophers
        self.meals = meals
        self.max_delay = max_delay
        self.gate = gate
        self.out = out
        self.utensils = [threading.Semaphore(1) for _ in range(n_philosophers)]
        self.eaten = [0] * n_philosophers
        self._table = threading.Barrier(n_philosophers)
        self._out_lock = threading.Lock()

    def _emit(self, text: str) -> None:
        with self._out_lock:
            print(text, file=self.out if self.out is not None else sys.stdout)

    def philosopher(self, n: int) -> int:
        """Eat all meals as diner n; return n when done."""
        rng = GlibcRandom((n + 1) * int(time.time()))
        first, second = utensil_order(n, self.n_philosophers)
        self._emit(f"Swanson {n}: wants utensils {first} and {second}")

        if self.gate:
            self._emit(f"Swanson {n} at the table")
            self._table.wait()

        meals = self.meals
        i = 0
        for i in range(meals):
            tag = f"Swanson {n} (egg {i:2d}/{meals:2d})"
            sleep_time = rng.rand() % self.max_delay if self.max_delay else 0
            time.sleep(sleep_time / 1e6)
            self._emit(f"{tag}: contemplated his awesomeness for {sleep_time} microseconds")

            self.utensils[first].acquire()
            self._emit(f"{tag}: got utensil {first}")
            self.utensils[second].acquire()
            self._emit(f"{tag}: got utensil {second}")

            self._emit(f"{tag}: eating egg {i}")
            self.eaten[n] += 1

            self.utensils[first].release()
            self.utensils[second].release()
            self._emit(f"{tag}: released utensil {first} and utensil {second}")
        else:
            i = meals

        self._emit(f"Swanson {n} (egg {i:2d}/{meals:2d}): leaving the diner")
        return n

    def run(self) -> list[int]:
        """Seat every diner in its own thread; return each diner's result in seat order."""
        self._emit("The Dining Swansons (Philosophers) Problem")
        results: list[int | None] = [None] * self.n_philosophers

        def seat(n: int) -> None:
            results[n] = self.philosopher(n)

        threads = [threading.Thread(target=seat, args=(n,)) for n in range(self.n_philosophers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        return [r if r is not None else -1 for r in results]


def main(argv: Sequence[str] | None = None) -> int:
    """Command line entry: philosophers [--philosophers N] [--meals M] [--max-delay US] [--gate]."""
    parser = argparse.ArgumentParser(prog="philosophers", description="Dining philosophers.")
    parser.add_argument("--philosophers", type=int, default=N_PHILOSOPHERS)
    parser.add_argument("--meals", type=int, default=MEALS_TO_FINISH)
    parser.add_argument("--max-delay", type=int, default=MAX_DELAY)
    parser.add_argument("--gate", action="store_true", help="wait for everyone before eating")
    args = parser.parse_args(argv)
    try:
        diner = Diner(args.philosophers, args.meals, args.max_delay, args.gate)
    except ValueError as exc:
        parser.error(str(exc))
    for n, result in enumerate(diner.run()):
        fate = "heaven" if result == n else "hell"
        print(f"Philosopher {n} went to {fate}!")
    return 0