"""
Relay session orchestration.

A session owns two connected streams. It runs one pump per direction plus
an idle supervisor and returns a single RelayOutcome once all three have
stopped. Both streams are closed before any entry point here returns.

Usage:
    from tcpbridge import connect

    outcome = connect(client_sock, upstream_sock, 5, 7_200)
    if not outcome.ok:
        print(outcome.error.side, outcome.error.cause)
"""

import asyncio
import socket
import time

from tcpbridge.config import config
from tcpbridge.models.enums import Direction, EndReason
from tcpbridge.relay.activity import ActivityClock
from tcpbridge.relay.exceptions import RelayConfigError, RelayIOError
from tcpbridge.relay.outcome import RelayOutcome
from tcpbridge.relay.pump import pump_stream
from tcpbridge.relay.streams import StreamPair, abort_stream, close_stream
from tcpbridge.relay.supervisor import IdleSupervisor
from tcpbridge.utils.logger import get_logger

logger = get_logger(__name__)

# rate_check_seconds is an unsigned byte of whole seconds
MIN_RATE_CHECK_SECONDS = 1
MAX_RATE_CHECK_SECONDS = 255
MIN_IDLE_TIMEOUT_SECONDS = 1


# =============================================================================
# Validation
# =============================================================================


def validate_timing(rate_check_seconds: int, idle_timeout_seconds: int) -> None:
    """
    Reject unusable timing parameters.

    Raises:
        RelayConfigError: If either value is not an integer in range.
    """
    for name, value in (
        ("rate_check_seconds", rate_check_seconds),
        ("idle_timeout_seconds", idle_timeout_seconds),
    ):
        if isinstance(value, bool) or not isinstance(value, int):
            raise RelayConfigError(
                f"{name} must be a whole number of seconds, got {value!r}"
            )

    if not MIN_RATE_CHECK_SECONDS <= rate_check_seconds <= MAX_RATE_CHECK_SECONDS:
        raise RelayConfigError(
            f"rate_check_seconds must be between {MIN_RATE_CHECK_SECONDS} and "
            f"{MAX_RATE_CHECK_SECONDS}, got {rate_check_seconds}"
        )

    if idle_timeout_seconds < MIN_IDLE_TIMEOUT_SECONDS:
        raise RelayConfigError(
            f"idle_timeout_seconds must be at least {MIN_IDLE_TIMEOUT_SECONDS}, "
            f"got {idle_timeout_seconds}"
        )


# =============================================================================
# Session
# =============================================================================


class RelaySession:
    """One client/upstream pairing, from hand-over to joint closure."""

    def __init__(
        self,
        client: StreamPair,
        upstream: StreamPair,
        rate_check_seconds: int,
        idle_timeout_seconds: int,
        label: str | None = None,
        close_timeout: float | None = None,
    ):
        """
        Initialize a relay session.

        Args:
            client: Reader/writer pair of the client connection.
            upstream: Reader/writer pair of the upstream connection.
            rate_check_seconds: Idle check interval in seconds (1-255).
            idle_timeout_seconds: Maximum silence in seconds (>= 1).
            label: Log prefix; derived from the client's peer address if None.
            close_timeout: Seconds to let buffered data flush when closing.

        Raises:
            RelayConfigError: If a timing parameter is invalid.
        """
        validate_timing(rate_check_seconds, idle_timeout_seconds)

        self.client = client
        self.upstream = upstream
        self.rate_check_seconds = rate_check_seconds
        self.idle_timeout_seconds = idle_timeout_seconds
        self.close_timeout = (
            config.CLOSE_TIMEOUT_SECONDS if close_timeout is None else close_timeout
        )

        if label is None:
            peer = client[1].get_extra_info("peername")
            label = f"[Session {peer}]" if peer else "[Session]"
        self.log_prefix = label

        self.clocks: dict[Direction, ActivityClock] = {}
        self._shutdown = asyncio.Event()

    @property
    def writers(self) -> tuple[asyncio.StreamWriter, asyncio.StreamWriter]:
        return self.client[1], self.upstream[1]

    def _force_shutdown(self) -> None:
        """Abort both streams, unblocking any pending read or drain."""
        self._shutdown.set()
        for writer in self.writers:
            abort_stream(writer)

    async def _close_streams(self) -> None:
        self._shutdown.set()
        await asyncio.gather(
            *(close_stream(writer, self.close_timeout) for writer in self.writers)
        )

    async def run(self) -> RelayOutcome:
        """
        Relay until either side closes, an I/O error occurs or the session
        goes idle.

        Returns:
            The session outcome. Both streams are closed on return.
        """
        started = time.monotonic()
        self.clocks = {
            direction: ActivityClock(last_activity=started) for direction in Direction
        }

        supervisor = IdleSupervisor(
            list(self.clocks.values()),
            self.rate_check_seconds,
            self.idle_timeout_seconds,
            on_idle=self._force_shutdown,
            log_prefix=self.log_prefix,
        )

        logger.debug(
            f"{self.log_prefix} Starting relay "
            f"(check every {self.rate_check_seconds}s, "
            f"idle timeout {self.idle_timeout_seconds}s)."
        )

        routes = {
            Direction.CLIENT_TO_UPSTREAM: (self.client[0], self.upstream[1]),
            Direction.UPSTREAM_TO_CLIENT: (self.upstream[0], self.client[1]),
        }
        pumps = [
            asyncio.create_task(
                pump_stream(
                    reader,
                    writer,
                    direction,
                    self.clocks[direction],
                    self._shutdown,
                    self.log_prefix,
                )
            )
            for direction, (reader, writer) in routes.items()
        ]
        supervisor_task = asyncio.create_task(supervisor.run())

        errors: list[RelayIOError] = []
        try:
            pending = set(pumps)
            while pending:
                done, pending = await asyncio.wait(
                    pending, return_when=asyncio.FIRST_COMPLETED
                )
                for task in done:
                    error = task.result()
                    if error is not None:
                        errors.append(error)

                # Either side finishing ends the whole session
                if pending and not self._shutdown.is_set():
                    logger.debug(f"{self.log_prefix} One direction ended, closing.")
                    await self._close_streams()

        except asyncio.CancelledError:
            logger.debug(f"{self.log_prefix} Relay cancelled, aborting streams.")
            self._force_shutdown()
            raise

        finally:
            supervisor.stop()
            for task in (*pumps, supervisor_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(*pumps, supervisor_task, return_exceptions=True)
            await self._close_streams()

        if errors:
            reason = EndReason.ERROR
        elif supervisor.timed_out:
            reason = EndReason.IDLE_TIMEOUT
        else:
            reason = EndReason.EOF

        outcome = RelayOutcome(
            reason=reason,
            error=errors[0] if errors else None,
            bytes_client_to_upstream=self.clocks[
                Direction.CLIENT_TO_UPSTREAM
            ].bytes_relayed,
            bytes_upstream_to_client=self.clocks[
                Direction.UPSTREAM_TO_CLIENT
            ].bytes_relayed,
            duration=time.monotonic() - started,
        )
        logger.info(f"{self.log_prefix} Relay ended: {outcome.summary()}")
        return outcome


# =============================================================================
# Entry Points
# =============================================================================


async def relay_streams(
    client: StreamPair,
    upstream: StreamPair,
    rate_check_seconds: int,
    idle_timeout_seconds: int,
    label: str | None = None,
) -> RelayOutcome:
    """
    Relay bytes bidirectionally between two asyncio stream pairs.

    Args:
        client: Reader/writer pair of the client connection.
        upstream: Reader/writer pair of the upstream connection.
        rate_check_seconds: Idle check interval in seconds (1-255).
        idle_timeout_seconds: Maximum silence in seconds (>= 1).
        label: Optional log prefix.

    Returns:
        The session outcome. Both streams are closed on return.

    Raises:
        RelayConfigError: If a timing parameter is invalid. The streams are
            left untouched in that case.
    """
    session = RelaySession(
        client, upstream, rate_check_seconds, idle_timeout_seconds, label=label
    )
    return await session.run()


async def relay_sockets(
    client_sock: socket.socket,
    upstream_sock: socket.socket,
    rate_check_seconds: int,
    idle_timeout_seconds: int,
    label: str | None = None,
) -> RelayOutcome:
    """
    Relay bytes bidirectionally between two connected stream sockets.

    Both sockets are closed on return, including when wrapping them fails.

    Raises:
        RelayConfigError: If a timing parameter is invalid. The sockets are
            left untouched in that case.
    """
    validate_timing(rate_check_seconds, idle_timeout_seconds)

    try:
        client = await asyncio.open_connection(sock=client_sock)
    except BaseException:
        client_sock.close()
        upstream_sock.close()
        raise

    try:
        upstream = await asyncio.open_connection(sock=upstream_sock)
    except BaseException:
        abort_stream(client[1])
        upstream_sock.close()
        raise

    return await relay_streams(
        client, upstream, rate_check_seconds, idle_timeout_seconds, label=label
    )


def connect(
    client_sock: socket.socket,
    upstream_sock: socket.socket,
    rate_check_seconds: int,
    idle_timeout_seconds: int,
) -> RelayOutcome:
    """
    Bridge two connected sockets, blocking until the relay ends.

    Returns when either side closes, an I/O error occurs, or no traffic has
    crossed in either direction for ``idle_timeout_seconds``. Traffic-based
    only: no keepalive probes are sent. Must not be called from a running
    event loop; use ``relay_sockets`` there.

    Args:
        client_sock: Connected client socket; owned by the call.
        upstream_sock: Connected upstream socket; owned by the call.
        rate_check_seconds: Idle check interval in seconds (1-255).
        idle_timeout_seconds: Maximum silence in seconds (>= 1).

    Returns:
        The session outcome. Both sockets are closed on return.

    Raises:
        RelayConfigError: If a timing parameter is invalid, before either
            socket is touched.
    """
    validate_timing(rate_check_seconds, idle_timeout_seconds)
    return asyncio.run(
        relay_sockets(client_sock, upstream_sock, rate_check_seconds, idle_timeout_seconds)
    )
