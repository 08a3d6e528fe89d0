"""Unidirectional relay loop."""

import asyncio

from tcpbridge.models.enums import Direction, IOOperation
from tcpbridge.relay.activity import ActivityClock
from tcpbridge.relay.exceptions import RelayIOError
from tcpbridge.utils.logger import get_logger

logger = get_logger(__name__)

# Upper bound on a single read from the source stream
CHUNK_SIZE = 16 * 1024


async def pump_stream(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    direction: Direction,
    activity: ActivityClock,
    shutdown: asyncio.Event,
    log_prefix: str = "",
) -> RelayIOError | None:
    """
    Pipe data from reader to writer until EOF, error or session shutdown.

    The pump never closes either stream; the session does that.

    Args:
        reader: Source stream reader.
        writer: Destination stream writer.
        direction: Direction this pump serves, used to tag errors.
        activity: Clock updated after every forwarded chunk.
        shutdown: Set once the session is tearing the streams down. Errors
            seen after that point are shutdown-induced and not reported.
        log_prefix: Prefix for log messages.

    Returns:
        None on orderly termination, otherwise the read/write failure.
    """
    while True:
        try:
            data = await reader.read(CHUNK_SIZE)
        except OSError as e:
            return _classify(e, direction, IOOperation.READ, shutdown, log_prefix)

        if not data:
            logger.debug(f"{log_prefix} {direction.value}: end of stream.")
            return None

        try:
            writer.write(data)
            await writer.drain()
        except OSError as e:
            return _classify(e, direction, IOOperation.WRITE, shutdown, log_prefix)

        activity.record(len(data))
        logger.trace(f"{log_prefix} {direction.value}: forwarded {len(data)} bytes.")


def _classify(
    error: OSError,
    direction: Direction,
    operation: IOOperation,
    shutdown: asyncio.Event,
    log_prefix: str,
) -> RelayIOError | None:
    if shutdown.is_set():
        logger.debug(
            f"{log_prefix} {direction.value}: {operation.value} interrupted by "
            f"shutdown ({error})."
        )
        return None

    side = direction.source if operation is IOOperation.READ else direction.destination
    relay_error = RelayIOError(direction, side, operation, error)
    relay_error.__cause__ = error
    logger.warning(f"{log_prefix} {relay_error}")
    return relay_error
