"""Small thread demonstrations: a condition-variable watcher, lock waiting,
thread identities and handing values to and from threads.
"""

from __future__ import annotations

import argparse
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence, TextIO

NUM_THREADS = 3
TCOUNT = 10
COUNT_LIMIT = 12
WATCHER_BONUS = 125


class CountWatcher:
    """Two threads count up while a third waits for a threshold and then adds a bonus."""

    def __init__(
        self,
        tcount: int = TCOUNT,
        limit: int = COUNT_LIMIT,
        delay: float = 1.0,
        out: TextIO | None = None,
    ) -> None:
        if tcount < 0:
            raise ValueError(f"tcount must not be negative, got {tcount}")
        if delay < 0:
            raise ValueError(f"delay must not be negative, got {delay}")
        if limit > 2 * tcount:
            raise ValueError(
                f"limit {limit} can never be reached by two threads counting to {tcount}"
            )
        self.tcount = tcount
        self.limit = limit
        self.delay = delay
        self.out = out
        self.count = 0
        self._threshold = threading.Condition()

    def _emit(self, text: str, end: str = "\n") -> None:
        stream = self.out if self.out is not None else sys.stdout
        print(text, end=end, file=stream)

    def inc_count(self, tid: int) -> None:
        """Increment the count tcount times, signalling when it hits the limit."""
        for _ in range(self.tcount):
            with self._threshold:
                self.count += 1
                if self.count == self.limit:
                    self._emit(
                        f"inc_count(): thread {tid}, count = {self.count}  Threshold reached. ",
                        end="",
                    )
                    self._threshold.notify()
                    self._emit("Just sent signal.")
                self._emit(f"inc_count(): thread {tid}, count = {self.count}, unlocking mutex")
            time.sleep(self.delay)

    def watch_count(self, tid: int) -> None:
        """Wait until the count reaches the limit, then add the bonus."""
        self._emit(f"Starting watch_count(): thread {tid}")
        with self._threshold:
            while self.count < self.limit:
                self._emit(f"watch_count(): thread {tid} Count= {self.count}. Going into wait...")
                self._threshold.wait()
                self._emit(
                    f"watch_count(): thread {tid} Condition signal received. Count= {self.count}"
                )
                self._emit(f"watch_count(): thread {tid} Updating the value of count...")
                self.count += WATCHER_BONUS
                self._emit(f"watch_count(): thread {tid} count now = {self.count}.")
            self._emit(f"watch_count(): thread {tid} Unlocking mutex.")

    def run(self) -> int:
        """Run the watcher and both counters; return the final count."""
        threads = [
            threading.Thread(target=self.watch_count, args=(1,)),
            threading.Thread(target=self.inc_count, args=(2,)),
            threading.Thread(target=self.inc_count, args=(3,)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self._emit(
            f"Main(): Waited and joined with {len(threads)} threads. "
            f"Final value of count = {self.count}. Done."
        )
        return self.count


def double_with_lock(start: int = 1, threads: int = 2, delay: float = 1.0) -> int:
    """Have each thread double a shared value while holding a lock and sleeping.

    Waiting threads block rather than spin, so the run takes about
    threads * delay seconds of wall time but little CPU time.
    """
    if threads < 0:
        raise ValueError(f"threads must not be negative, got {threads}")
    value = start
    lock = threading.Lock()

    def doit() -> None:
        nonlocal value
        with lock:
            value = value * 2
            time.sleep(delay)

    workers = [threading.Thread(target=doit) for _ in range(threads)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()
    return value


def double_in_thread(value: int) -> int:
    """Pass value to a new thread, which doubles it and hands the result back."""
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(lambda p: p * 2, value).result()


def double_shared(value: int = 42, out: TextIO | None = None) -> int:
    """Let a thread double a variable owned by the caller; return the new value."""
    stream = out if out is not None else sys.stdout
    shared = value

    def doit() -> None:
        nonlocal shared
        print(f"doit: I am thread {threading.get_ident()}", file=stream)
        shared = shared * 2

    worker = threading.Thread(target=doit)
    worker.start()
    print(f"main: I am thread {threading.get_ident()}", file=stream)
    worker.join()
    print(f"stack var is: {shared}", file=stream)
    return shared


def main(argv: Sequence[str] | None = None) -> int:
    """Command line entry: threaddemos {condvar,mutex,ids,minimal} [--delay S]."""
    parser = argparse.ArgumentParser(prog="threaddemos", description="Thread demonstrations.")
    parser.add_argument("demo", choices=["condvar", "mutex", "ids", "minimal"])
    parser.add_argument("--delay", type=float, default=1.0)
    args = parser.parse_args(argv)
    try:
        if args.demo == "condvar":
            CountWatcher(delay=args.delay).run()
        elif args.demo == "mutex":
            print("BEFORE glob: 1")
            print(f"AFTER glob: {double_with_lock(1, 2, args.delay)}")
        elif args.demo == "ids":
            double_shared(42)
        else:
            print(f"result is: {double_in_thread(42)}")
    except ValueError as exc:
        parser.error(str(exc))
    return 0