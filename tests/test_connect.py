"""End-to-end tests of the blocking connect() entry point over loopback TCP."""

import socket
import struct
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from tcpbridge import EndReason, StreamSide, connect

REQUEST = b"GET / HTTP/1.0\r\n\r\n"
RESPONSE = b"HTTP/1.0 200 OK\r\n\r\n"


def recv_exactly(sock: socket.socket, size: int) -> bytes:
    """Read exactly ``size`` bytes from a blocking socket."""
    chunks = bytearray()
    while len(chunks) < size:
        data = sock.recv(size - len(chunks))
        if not data:
            raise EOFError(f"peer closed after {len(chunks)} of {size} bytes")
        chunks += data
    return bytes(chunks)


@pytest.fixture
def pool():
    with ThreadPoolExecutor(max_workers=1) as executor:
        yield executor


def test_http_exchange_is_relayed_verbatim(bridge, pool):
    future = pool.submit(connect, bridge.client, bridge.upstream, 1, 30)

    bridge.client_peer.sendall(REQUEST)
    assert recv_exactly(bridge.upstream_peer, len(REQUEST)) == REQUEST

    bridge.upstream_peer.sendall(RESPONSE)
    assert recv_exactly(bridge.client_peer, len(RESPONSE)) == RESPONSE

    # Client finishes; the whole session ends
    bridge.client_peer.shutdown(socket.SHUT_WR)
    outcome = future.result(timeout=10)

    assert outcome.ok
    assert outcome.reason is EndReason.EOF
    assert outcome.bytes_client_to_upstream == len(REQUEST)
    assert outcome.bytes_upstream_to_client == len(RESPONSE)
    assert bridge.upstream_peer.recv(1) == b""
    assert bridge.client_peer.recv(1) == b""
    assert bridge.client.fileno() == -1
    assert bridge.upstream.fileno() == -1


def test_upstream_close_ends_session(bridge, pool):
    future = pool.submit(connect, bridge.client, bridge.upstream, 1, 30)

    bridge.upstream_peer.sendall(b"banner\n")
    assert recv_exactly(bridge.client_peer, 7) == b"banner\n"
    bridge.upstream_peer.close()

    outcome = future.result(timeout=10)

    assert outcome.ok
    assert outcome.reason is EndReason.EOF
    assert bridge.client_peer.recv(1) == b""


def test_silent_session_times_out(bridge, pool):
    started = time.monotonic()
    future = pool.submit(connect, bridge.client, bridge.upstream, 1, 2)

    outcome = future.result(timeout=10)
    elapsed = time.monotonic() - started

    assert outcome.ok
    assert outcome.timed_out
    assert outcome.reason is EndReason.IDLE_TIMEOUT
    assert 1.9 <= elapsed < 4.0
    assert bridge.client.fileno() == -1
    assert bridge.upstream.fileno() == -1
    assert bridge.client_peer.recv(1) == b""
    assert bridge.upstream_peer.recv(1) == b""


def test_one_way_traffic_keeps_session_alive(bridge, pool):
    future = pool.submit(connect, bridge.client, bridge.upstream, 1, 2)

    # Download only, for well past the idle timeout
    deadline = time.monotonic() + 3.5
    sent = 0
    while time.monotonic() < deadline:
        bridge.upstream_peer.sendall(b"x")
        assert recv_exactly(bridge.client_peer, 1) == b"x"
        sent += 1
        time.sleep(0.25)

    assert not future.done()

    bridge.client_peer.shutdown(socket.SHUT_WR)
    outcome = future.result(timeout=10)

    assert outcome.reason is EndReason.EOF
    assert outcome.bytes_upstream_to_client == sent
    assert outcome.bytes_client_to_upstream == 0


def test_upstream_reset_is_reported_as_upstream_error(bridge, pool):
    future = pool.submit(connect, bridge.client, bridge.upstream, 1, 30)

    bridge.client_peer.sendall(b"partial upload")
    assert recv_exactly(bridge.upstream_peer, 14) == b"partial upload"

    # SO_LINGER with a zero timeout makes close() send RST
    bridge.upstream_peer.setsockopt(
        socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0)
    )
    bridge.upstream_peer.close()

    outcome = future.result(timeout=10)

    assert not outcome.ok
    assert outcome.reason is EndReason.ERROR
    assert outcome.error.side is StreamSide.UPSTREAM
    assert isinstance(outcome.error.cause, OSError)
    assert "upstream" in str(outcome.error)
    with pytest.raises(type(outcome.error)):
        outcome.raise_for_error()
    assert bridge.client_peer.recv(1) == b""
    assert bridge.client.fileno() == -1
