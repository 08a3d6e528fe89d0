"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import socket
from types import SimpleNamespace

import pytest


@pytest.fixture
def tcp_pair():
    """Factory for connected loopback TCP socket pairs, closed at teardown."""
    listener = socket.create_server(("127.0.0.1", 0))
    created: list[socket.socket] = []

    def make() -> tuple[socket.socket, socket.socket]:
        near = socket.create_connection(listener.getsockname())
        far, _ = listener.accept()
        created.extend([near, far])
        return near, far

    yield make

    for sock in created:
        sock.close()
    listener.close()


@pytest.fixture
def bridge(tcp_pair):
    """
    Sockets around a bridge under test.

    client_peer <-> client (bridge side) ... upstream (bridge side) <-> upstream_peer
    """
    client_peer, client = tcp_pair()
    upstream, upstream_peer = tcp_pair()
    client_peer.settimeout(10)
    upstream_peer.settimeout(10)
    return SimpleNamespace(
        client_peer=client_peer,
        client=client,
        upstream=upstream,
        upstream_peer=upstream_peer,
    )


@pytest.fixture
def closed_port() -> int:
    """A loopback port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
