"""
Enumeration types for tcpbridge.

This module defines the enumeration types used throughout the relay for
direction tagging, error classification, session results and configuration.
"""

from enum import Enum


# =============================================================================
# Relay-Related Enums
# =============================================================================


class StreamSide(str, Enum):
    """Which of the two relayed connections an event belongs to."""

    CLIENT = "client"  # Connection accepted from (or supplied as) the client
    UPSTREAM = "upstream"  # Connection dialed towards the relayed service


class Direction(str, Enum):
    """
    Direction of a relay pump.

    Each direction reads from one side and writes to the other:
        - CLIENT_TO_UPSTREAM: client read side -> upstream write side
        - UPSTREAM_TO_CLIENT: upstream read side -> client write side
    """

    CLIENT_TO_UPSTREAM = "client->upstream"
    UPSTREAM_TO_CLIENT = "upstream->client"

    @property
    def source(self) -> StreamSide:
        """Side this direction reads from."""
        if self is Direction.CLIENT_TO_UPSTREAM:
            return StreamSide.CLIENT
        return StreamSide.UPSTREAM

    @property
    def destination(self) -> StreamSide:
        """Side this direction writes to."""
        if self is Direction.CLIENT_TO_UPSTREAM:
            return StreamSide.UPSTREAM
        return StreamSide.CLIENT


class IOOperation(str, Enum):
    """Stream operation that failed."""

    READ = "read"
    WRITE = "write"


class EndReason(str, Enum):
    """
    Why a relay session ended.

    - EOF: Either side closed its connection (orderly end)
    - IDLE_TIMEOUT: No bytes crossed in either direction for too long
    - ERROR: A genuine read/write failure ended the session
    """

    EOF = "eof"
    IDLE_TIMEOUT = "idle_timeout"
    ERROR = "error"


# =============================================================================
# Configuration Enums
# =============================================================================


class LogLevel(str, Enum):
    """
    Logging verbosity levels for tcpbridge.

    Levels (from most to least verbose):
        - FULL: Every forwarded chunk is traced
        - DEBUG: Debug messages and above
        - INFO: Informational messages and above
        - WARNING: Only warnings and errors
    """

    FULL = "full"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
