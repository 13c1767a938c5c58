"""Unix domain socket demonstration.

The server binds a stream socket to a path on the file system, greets
each client and prints whatever the client sends until it hangs up. The
client prints the greeting, announces itself and forwards its standard
input to the server.
"""

from __future__ import annotations

import argparse
import os
import socket
import sys
from typing import BinaryIO, Sequence, TextIO

BACKLOG = 10
BUFSIZE = 128


def _stream(out: TextIO | None) -> TextIO:
    return out if out is not None else sys.stdout


def _limited(text: str) -> bytes:
    """Encode text, keeping at most BUFSIZE - 1 bytes as a bounded format would."""
    return text.encode("utf-8")[: BUFSIZE - 1]


def _show(data: bytes) -> str:
    return f"read {len(data)} bytes: {data.decode('utf-8', errors='replace')}"


def open_server(sockfile: str | os.PathLike) -> socket.socket:
    """Replace any file at sockfile with a listening Unix stream socket."""
    path = os.fspath(sockfile)
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    listener = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        listener.bind(path)
        listener.listen(BACKLOG)
    except OSError:
        listener.close()
        raise
    return listener


def _serve_one(listener: socket.socket, stream: TextIO) -> bytes:
    print("waiting for a client", file=stream)
    client, _ = listener.accept()
    received = bytearray()
    with client:
        print("client connection established", file=stream)
        client.sendall(_limited(f"server {os.getpid()} listening for input"))
        while chunk := client.recv(BUFSIZE):
            print(_show(chunk), file=stream)
            received += chunk
    print("client connection closed", file=stream)
    return bytes(received)


def serve(
    listener: socket.socket,
    loop: bool = False,
    out: TextIO | None = None,
    max_clients: int | None = None,
) -> list[bytes]:
    """Serve clients one at a time; return everything each client sent.

    Without loop a single client is served. With loop clients are served
    until max_clients have been handled, or forever if it is None.
    """
    if max_clients is not None and max_clients < 0:
        raise ValueError(f"max_clients must not be negative, got {max_clients}")
    limit = None if loop else 1
    if max_clients is not None:
        limit = max_clients if limit is None else min(limit, max_clients)
    stream = _stream(out)
    results: list[bytes] = []
    while limit is None or len(results) < limit:
        results.append(_serve_one(listener, stream))
    return results


def run_client(
    sockfile: str | os.PathLike,
    stdin: BinaryIO | TextIO | None = None,
    out: TextIO | None = None,
) -> str:
    """Connect to the server at sockfile, forward stdin to it; return its greeting."""
    path = os.fspath(sockfile)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Cant access socket file '{path}' - is the server running?")
    stream = _stream(out)
    source = stdin if stdin is not None else sys.stdin.buffer
    reader = getattr(source, "read1", None) or source.read
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
        sock.connect(path)
        greeting = sock.recv(BUFSIZE)
        print(_show(greeting), file=stream)
        sock.sendall(_limited(f"client process {os.getpid()} connected"))
        while chunk := reader(BUFSIZE):
            if isinstance(chunk, str):
                chunk = chunk.encode("utf-8")
            sock.sendall(chunk)
    return greeting.decode("utf-8", errors="replace")


def _usage(prog: str) -> None:
    print(f"usage: {prog} <sockfile>")
    print("  sockfile is the name of a file which will be used for the socket")


def main_server(argv: Sequence[str] | None = None) -> int:
    """Command line entry: unix_server <sockfile> [--loop]."""
    parser = argparse.ArgumentParser(prog="unix_server", add_help=False)
    parser.add_argument("sockfile", nargs="?")
    parser.add_argument("--loop", action="store_true")
    args, extra = parser.parse_known_args(argv)
    if args.sockfile is None or extra:
        _usage(parser.prog)
        return 1
    with open_server(args.sockfile) as listener:
        try:
            serve(listener, loop=args.loop)
        except KeyboardInterrupt:
            pass
    return 0


def main_client(argv: Sequence[str] | None = None) -> int:
    """Command line entry: unix_client <sockfile>."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        _usage("unix_client")
        return 1
    try:
        run_client(args[0])
    except FileNotFoundError as exc:
        print(exc)
        return 1
    return 0