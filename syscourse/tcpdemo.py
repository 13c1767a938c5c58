"""TCP demonstration: a greeting server, a client that fetches one message,
and a server that gathers several clients before announcing shutdown.
"""

from __future__ import annotations

import argparse
import ipaddress
import socket
import sys
from typing import Sequence, TextIO

PORT = "12344"
BACKLOG = 10
MAXDATASIZE = 100
MAX_CLIENTS = 4
GREETING = b"Hello, world!"
SHUTDOWN_MESSAGE = b"Server shutting down."


def _stream(out: TextIO | None) -> TextIO:
    return out if out is not None else sys.stdout


def address_string(sockaddr: tuple) -> str:
    """Return the printable IP address held in a socket address tuple."""
    if not sockaddr:
        raise ValueError("empty socket address")
    host = sockaddr[0]
    try:
        return str(ipaddress.ip_address(host))
    except ValueError as exc:
        raise ValueError(f"not an IP address: {host!r}") from exc


def address_with_port(sockaddr: tuple) -> str:
    """Return 'address:port' for a socket address tuple."""
    if len(sockaddr) < 2:
        raise ValueError(f"socket address has no port: {sockaddr!r}")
    return f"{address_string(sockaddr)}:{sockaddr[1]}"


def open_listener(host: str | None = None, port: int | str = PORT) -> socket.socket:
    """Bind a reusable stream socket to the first passive address and listen on it."""
    family, socktype, proto, _, sockaddr = socket.getaddrinfo(
        host, port, socket.AF_UNSPEC, socket.SOCK_STREAM, 0, socket.AI_PASSIVE
    )[0]
    listener = socket.socket(family, socktype, proto)
    try:
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.bind(sockaddr)
        listener.listen(BACKLOG)
    except OSError:
        listener.close()
        raise
    return listener


def serve_hello(
    listener: socket.socket, max_clients: int | None = None, out: TextIO | None = None
) -> int:
    """Greet each client that connects and hang up; return how many were served.

    With max_clients None the server runs forever.
    """
    stream = _stream(out)
    served = 0
    while max_clients is None or served < max_clients:
        client, client_addr = listener.accept()
        with client:
            print(f"SERVER: connection from {address_string(client_addr)}", file=stream)
            client.sendall(GREETING)
        served += 1
    return served


def pause_server(
    listener: socket.socket, clients: int = MAX_CLIENTS, out: TextIO | None = None
) -> list[str]:
    """Accept the given number of clients, then tell each the server is shutting down.

    Returns the 'address:port' of every client in the order they connected.
    """
    if clients < 0:
        raise ValueError(f"clients must not be negative, got {clients}")
    stream = _stream(out)
    connections: list[socket.socket] = []
    peers: list[str] = []
    try:
        for i in range(clients):
            client, client_addr = listener.accept()
            connections.append(client)
            print(f"SERVER: connection {i} from {address_with_port(client_addr)}", file=stream)
        for client in connections:
            peer = address_with_port(client.getpeername())
            print(f"SERVER: sending shutdown to {peer}", file=stream)
            client.sendall(SHUTDOWN_MESSAGE)
            peers.append(peer)
    finally:
        for client in connections:
            client.close()
    return peers


def fetch(hostname: str, port: int | str = PORT, out: TextIO | None = None) -> str:
    """Connect to the first address of hostname, read one message and return it."""
    stream = _stream(out)
    family, socktype, proto, _, sockaddr = socket.getaddrinfo(
        hostname, port, type=socket.SOCK_STREAM
    )[0]
    with socket.socket(family, socktype, proto) as sock:
        sock.connect(sockaddr)
        print(f"client: connected to {address_with_port(sockaddr)}", file=stream)
        data = sock.recv(MAXDATASIZE - 1)
    text = data.decode("utf-8", errors="replace")
    print(f"client: received '{text}'", file=stream)
    return text


def _start_listener(port: str) -> socket.socket | None:
    try:
        listener = open_listener(None, port)
    except OSError as exc:
        print(f"bind failed: {exc}", file=sys.stderr)
        return None
    print(f"SERVER: address is {address_string(listener.getsockname())}")
    print(f"SERVER: waiting for connections on port {port}")
    return listener


def main_server(argv: Sequence[str] | None = None) -> int:
    """Command line entry: greet every client forever."""
    parser = argparse.ArgumentParser(prog="simple_server", description="Greeting server.")
    parser.add_argument("--port", default=PORT)
    args = parser.parse_args(argv)
    listener = _start_listener(args.port)
    if listener is None:
        return 1
    with listener:
        try:
            serve_hello(listener)
        except KeyboardInterrupt:
            pass
    return 0


def main_pause(argv: Sequence[str] | None = None) -> int:
    """Command line entry: gather clients, then announce shutdown to each."""
    parser = argparse.ArgumentParser(prog="pause_server", description="Pause server.")
    parser.add_argument("--port", default=PORT)
    parser.add_argument("--clients", type=int, default=MAX_CLIENTS)
    args = parser.parse_args(argv)
    if args.clients < 0:
        parser.error("--clients must not be negative")
    listener = _start_listener(args.port)
    if listener is None:
        return 1
    with listener:
        pause_server(listener, args.clients)
    return 0


def main_client(argv: Sequence[str] | None = None) -> int:
    """Command line entry: client hostname [--port P]."""
    parser = argparse.ArgumentParser(prog="client", add_help=False)
    parser.add_argument("hostname", nargs="?")
    parser.add_argument("--port", default=PORT)
    args, extra = parser.parse_known_args(argv)
    if args.hostname is None or extra:
        print("usage: client hostname", file=sys.stderr)
        return 1
    fetch(args.hostname, args.port)
    return 0