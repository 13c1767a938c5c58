import io
import socket
import threading

import pytest

from syscourse import tcpdemo


@pytest.fixture
def listener():
    sock = tcpdemo.open_listener("127.0.0.1", 0)
    sock.settimeout(10)
    yield sock
    sock.close()


def _run(target, *args, **kwargs):
    result = {}

    def body():
        result["value"] = target(*args, **kwargs)

    thread = threading.Thread(target=body)
    thread.start()
    return thread, result


def test_address_string_ipv4():
    assert tcpdemo.address_string(("127.0.0.1", 80)) == "127.0.0.1"


def test_address_string_ipv6_is_canonical():
    assert tcpdemo.address_string(("0:0:0:0:0:0:0:1", 5, 0, 0)) == "::1"


def test_address_with_port():
    assert tcpdemo.address_with_port(("127.0.0.1", 12344)) == "127.0.0.1:12344"


def test_address_string_rejects_hostnames():
    with pytest.raises(ValueError):
        tcpdemo.address_string(("not-an-ip", 1))


def test_address_with_port_requires_port():
    with pytest.raises(ValueError):
        tcpdemo.address_with_port(("127.0.0.1",))


def test_open_listener_binds_requested_host(listener):
    host, port = listener.getsockname()
    assert host == "127.0.0.1"
    assert port > 0
    assert listener.getsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR) != 0


def test_open_listener_port_in_use_raises(listener):
    port = listener.getsockname()[1]
    with pytest.raises(OSError):
        tcpdemo.open_listener("127.0.0.1", port)


def test_serve_and_fetch_round_trip(listener):
    port = listener.getsockname()[1]
    server_out = io.StringIO()
    thread, result = _run(tcpdemo.serve_hello, listener, 1, server_out)
    client_out = io.StringIO()
    text = tcpdemo.fetch("127.0.0.1", port, client_out)
    thread.join(10)
    assert text == "Hello, world!"
    assert result["value"] == 1
    assert "SERVER: connection from 127.0.0.1" in server_out.getvalue()
    lines = client_out.getvalue().splitlines()
    assert lines == [
        f"client: connected to 127.0.0.1:{port}",
        "client: received 'Hello, world!'",
    ]


def test_serve_hello_counts_clients(listener):
    port = listener.getsockname()[1]
    thread, result = _run(tcpdemo.serve_hello, listener, 3, io.StringIO())
    texts = [tcpdemo.fetch("127.0.0.1", port, io.StringIO()) for _ in range(3)]
    thread.join(10)
    assert texts == ["Hello, world!"] * 3
    assert result["value"] == 3


def test_pause_server_notifies_every_client(listener):
    port = listener.getsockname()[1]
    out = io.StringIO()
    thread, result = _run(tcpdemo.pause_server, listener, 2, out)
    clients = [socket.create_connection(("127.0.0.1", port), timeout=10) for _ in range(2)]
    try:
        received = [c.recv(100) for c in clients]
        names = [tcpdemo.address_with_port(c.getsockname()) for c in clients]
    finally:
        for c in clients:
            c.close()
    thread.join(10)
    assert received == [b"Server shutting down."] * 2
    assert result["value"] == names
    text = out.getvalue()
    assert "SERVER: connection 0 from" in text
    assert "SERVER: connection 1 from" in text
    assert text.count("SERVER: sending shutdown to") == 2


def test_pause_server_rejects_negative(listener):
    with pytest.raises(ValueError):
        tcpdemo.pause_server(listener, -1, io.StringIO())


def test_main_client_usage(capsys):
    assert tcpdemo.main_client([]) == 1
    assert "usage: client hostname" in capsys.readouterr().err


def test_main_client_fetches(listener, capsys):
    port = listener.getsockname()[1]
    thread, _ = _run(tcpdemo.serve_hello, listener, 1, io.StringIO())
    code = tcpdemo.main_client(["127.0.0.1", "--port", str(port)])
    thread.join(10)
    assert code == 0
    assert "client: received 'Hello, world!'" in capsys.readouterr().out


def test_main_server_reports_bind_failure(listener, capsys):
    port = listener.getsockname()[1]
    blocker = socket.socket(socket.AF_INET6 if socket.has_ipv6 else socket.AF_INET)
    blocker.close()
    # Occupy the wildcard port that main_server would bind.
    busy = tcpdemo.open_listener(None, 0)
    try:
        busy_port = busy.getsockname()[1]
        assert tcpdemo.main_server(["--port", str(busy_port)]) == 1
    finally:
        busy.close()
    assert "bind failed" in capsys.readouterr().err
    assert port > 0