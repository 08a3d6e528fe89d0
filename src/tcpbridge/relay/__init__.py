"""
Bidirectional byte relay with traffic-based idle supervision.

Two pumps copy bytes between a client and an upstream stream while an idle
supervisor shuts both down once no traffic has crossed for too long.
"""

from tcpbridge.relay.activity import ActivityClock
from tcpbridge.relay.exceptions import RelayConfigError, RelayError, RelayIOError
from tcpbridge.relay.outcome import RelayOutcome
from tcpbridge.relay.pump import CHUNK_SIZE, pump_stream
from tcpbridge.relay.session import (
    RelaySession,
    connect,
    relay_sockets,
    relay_streams,
    validate_timing,
)
from tcpbridge.relay.streams import StreamPair, abort_stream, close_stream
from tcpbridge.relay.supervisor import IdleSupervisor

__all__ = [
    "CHUNK_SIZE",
    "ActivityClock",
    "IdleSupervisor",
    "RelayConfigError",
    "RelayError",
    "RelayIOError",
    "RelayOutcome",
    "RelaySession",
    "StreamPair",
    "abort_stream",
    "close_stream",
    "connect",
    "pump_stream",
    "relay_sockets",
    "relay_streams",
    "validate_timing",
]
