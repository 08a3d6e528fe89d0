"""
tcpbridge: bidirectional byte relay between two connected streams.

Bytes are copied in both directions until either side closes, an I/O error
occurs, or no traffic crosses for the configured idle timeout. "Alive" means
traffic passed through the bridge; no keepalive probes are sent.
"""

from tcpbridge.models.enums import Direction, EndReason, IOOperation, StreamSide
from tcpbridge.relay import (
    RelayConfigError,
    RelayError,
    RelayIOError,
    RelayOutcome,
    connect,
    relay_sockets,
    relay_streams,
)
from tcpbridge.server import BridgeServer

__version__ = "0.1.0"

__all__ = [
    "BridgeServer",
    "Direction",
    "EndReason",
    "IOOperation",
    "RelayConfigError",
    "RelayError",
    "RelayIOError",
    "RelayOutcome",
    "StreamSide",
    "connect",
    "relay_sockets",
    "relay_streams",
]
