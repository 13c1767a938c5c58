"""Two parties exchanging text over a pair of bounded message queues.

Kirk reads lines of text, sends each one to the "enterprise" queue and
waits for the reply on his own queue. Spock waits on the enterprise
queue forever and answers every message he receives. Messages are
limited in size and each queue holds a limited number of them.
"""

from __future__ import annotations

import argparse
import queue
import sys
import threading
from typing import Iterable, Sequence, TextIO

MAX_LEN = 128
MAX_MSG = 10


def _stream(out: TextIO | None) -> TextIO:
    return out if out is not None else sys.stdout


def _truncate(text: str, limit: int) -> str:
    """Cut text to at most limit bytes of UTF-8 without splitting a character."""
    return text.encode("utf-8")[:limit].decode("utf-8", errors="ignore")


class MessageQueue:
    """A bounded FIFO of text messages, each at most msgsize bytes."""

    def __init__(self, maxmsg: int = MAX_MSG, msgsize: int = MAX_LEN) -> None:
        if maxmsg < 1:
            raise ValueError(f"maxmsg must be positive, got {maxmsg}")
        if msgsize < 1:
            raise ValueError(f"msgsize must be positive, got {msgsize}")
        self.maxmsg = maxmsg
        self.msgsize = msgsize
        self._queue: queue.Queue[str] = queue.Queue(maxsize=maxmsg)

    def send(self, message: str) -> None:
        """Put a message on the queue, blocking while the queue is full."""
        size = len(message.encode("utf-8"))
        if size > self.msgsize:
            raise ValueError(f"message of {size} bytes exceeds the limit of {self.msgsize}")
        self._queue.put(message)

    def receive(self, timeout: float | None = None) -> str:
        """Take the oldest message, waiting up to timeout seconds (forever if None)."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError(f"no message arrived within {timeout} seconds") from None

    def __len__(self) -> int:
        return self._queue.qsize()


def spock_reply(message: str) -> str:
    """Spock's answer to a message, cut to fit a message buffer."""
    return _truncate(f"Captain: '{message}' is highly illogical\n", MAX_LEN - 1)


def _chunks(lines: Iterable[str]) -> Iterable[str]:
    """Split input lines into pieces as a fixed buffer of MAX_LEN would read them."""
    limit = MAX_LEN - 1
    for line in lines:
        while line:
            piece = _truncate(line, limit)
            if not piece:
                piece = line[0]
            yield piece
            line = line[len(piece):]


def kirk(
    lines: Iterable[str],
    outgoing: MessageQueue,
    incoming: MessageQueue,
    out: TextIO | None = None,
) -> list[str]:
    """Send each line and wait for its reply; return the replies in order."""
    stream = _stream(out)
    replies: list[str] = []
    for chunk in _chunks(lines):
        message = chunk[:-1] if chunk.endswith("\n") else chunk
        print(f"sending '{message}'", file=stream)
        outgoing.send(message)
        reply = incoming.receive()
        print(f"enterprise responded: {reply}", file=stream)
        replies.append(reply)
    return replies


def spock(
    incoming: MessageQueue,
    outgoing: MessageQueue,
    out: TextIO | None = None,
    limit: int | None = None,
) -> int:
    """Answer messages, forever or until limit have been handled; return how many."""
    if limit is not None and limit < 0:
        raise ValueError(f"limit must not be negative, got {limit}")
    stream = _stream(out)
    handled = 0
    while limit is None or handled < limit:
        message = incoming.receive()
        print(f"spock received: '{message}'", file=stream)
        outgoing.send(spock_reply(message))
        handled += 1
    return handled


def main(argv: Sequence[str] | None = None) -> int:
    """Command line entry: exchange standard input lines between kirk and spock."""
    parser = argparse.ArgumentParser(
        prog="kirk_spock", description="Send lines of text to spock and print his replies."
    )
    parser.parse_args(argv)
    enterprise = MessageQueue(MAX_MSG, MAX_LEN)
    kirk_queue = MessageQueue(MAX_MSG, MAX_LEN)
    print("spock: ready to receive messages, captain.")
    threading.Thread(target=spock, args=(enterprise, kirk_queue), daemon=True).start()
    print("Enter lines of text, ^D to quit:")
    kirk(sys.stdin, enterprise, kirk_queue)
    return 0