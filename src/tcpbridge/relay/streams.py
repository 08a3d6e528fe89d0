"""Stream types and shutdown helpers used by the relay."""

import asyncio

from tcpbridge.utils.logger import get_logger

logger = get_logger(__name__)

StreamPair = tuple[asyncio.StreamReader, asyncio.StreamWriter]


def abort_stream(writer: asyncio.StreamWriter) -> None:
    """
    Tear a stream down immediately, discarding unsent data.

    Pending ``read()`` calls on the paired reader see end-of-stream and
    pending ``drain()`` calls fail with a connection-lost error. Safe to call
    on a stream that is already closed.
    """
    transport = writer.transport
    if transport is None:
        return
    transport.abort()


async def close_stream(writer: asyncio.StreamWriter, timeout: float = 1.0) -> None:
    """
    Close a stream, giving buffered data ``timeout`` seconds to flush.

    Falls back to ``abort_stream`` when the peer is not reading. Idempotent.
    """
    writer.close()
    try:
        await asyncio.wait_for(writer.wait_closed(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.debug("Stream did not flush in time, aborting.")
        abort_stream(writer)
    except OSError as e:
        # Transport already failed; the error was reported by the pump
        logger.debug(f"Ignoring error while closing stream: {e}")
