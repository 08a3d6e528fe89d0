"""Relay-related exception classes."""

from tcpbridge.models.enums import Direction, IOOperation, StreamSide


class RelayError(Exception):
    """Base exception for relay operations."""

    pass


class RelayConfigError(RelayError):
    """Invalid session timing parameters."""

    pass


class RelayIOError(RelayError):
    """A read or write on one of the relayed streams failed."""

    def __init__(
        self,
        direction: Direction,
        side: StreamSide,
        operation: IOOperation,
        cause: OSError,
    ):
        self.direction = direction
        self.side = side
        self.operation = operation
        self.cause = cause
        super().__init__(
            f"{side.value} {operation.value} error ({direction.value}): {cause}"
        )
