"""
Relay listener.

Accepts client connections, dials the configured upstream for each one and
hands both streams to a relay session.
"""

import asyncio

from tcpbridge.config import config
from tcpbridge.relay.session import relay_streams, validate_timing
from tcpbridge.relay.streams import close_stream
from tcpbridge.utils.logger import format_traceback, get_logger

logger = get_logger(__name__)


async def handle_connection(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    upstream_host: str,
    upstream_port: int,
    rate_check_seconds: int,
    idle_timeout_seconds: int,
):
    """Handle a single incoming client connection."""
    client_addr = writer.get_extra_info("peername")
    log_prefix = f"[Client {client_addr}]"
    logger.info(f"{log_prefix} New connection.")

    try:
        # Connect to the upstream
        try:
            logger.debug(
                f"{log_prefix} Connecting to upstream {upstream_host}:{upstream_port}..."
            )
            upstream_reader, upstream_writer = await asyncio.wait_for(
                asyncio.open_connection(upstream_host, upstream_port),
                timeout=config.CONNECT_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"{log_prefix} Timeout connecting to upstream "
                f"{upstream_host}:{upstream_port}."
            )
            return
        except OSError as e:
            logger.warning(
                f"{log_prefix} Connection to upstream "
                f"{upstream_host}:{upstream_port} failed: {e}"
            )
            return

        logger.debug(f"{log_prefix} Upstream connection established.")

        outcome = await relay_streams(
            (reader, writer),
            (upstream_reader, upstream_writer),
            rate_check_seconds,
            idle_timeout_seconds,
            label=log_prefix,
        )
        if not outcome.ok:
            logger.warning(f"{log_prefix} Relay failed: {outcome.error}")

    except asyncio.CancelledError:
        logger.debug(f"{log_prefix} Connection handler cancelled.")
        raise

    except Exception as e:
        logger.error(f"{log_prefix} Unexpected error in connection handler: {e}")
        logger.debug(format_traceback(e))

    finally:
        await close_stream(writer, config.CLOSE_TIMEOUT_SECONDS)
        logger.info(f"{log_prefix} Connection handler finished.")


class BridgeServer:
    """Listening socket that relays every accepted client to one upstream."""

    def __init__(
        self,
        upstream_host: str,
        upstream_port: int,
        listen_host: str = "127.0.0.1",
        listen_port: int = 0,
        rate_check_seconds: int | None = None,
        idle_timeout_seconds: int | None = None,
    ):
        """
        Initialize the bridge server.

        Args:
            upstream_host: Host each client is relayed to.
            upstream_port: Port each client is relayed to.
            listen_host: Address to bind to.
            listen_port: Port to bind to (0 for auto).
            rate_check_seconds: Idle check interval; config default if None.
            idle_timeout_seconds: Idle timeout; config default if None.

        Raises:
            RelayConfigError: If a timing parameter is invalid.
        """
        self.upstream_host = upstream_host
        self.upstream_port = upstream_port
        self.listen_host = listen_host
        self.listen_port = listen_port
        self.rate_check_seconds = (
            config.RATE_CHECK_SECONDS
            if rate_check_seconds is None
            else rate_check_seconds
        )
        self.idle_timeout_seconds = (
            config.IDLE_TIMEOUT_SECONDS
            if idle_timeout_seconds is None
            else idle_timeout_seconds
        )
        validate_timing(self.rate_check_seconds, self.idle_timeout_seconds)

        self._server: asyncio.Server | None = None
        self._sessions: set[asyncio.Task] = set()

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        task = asyncio.current_task()
        self._sessions.add(task)
        try:
            await handle_connection(
                reader,
                writer,
                self.upstream_host,
                self.upstream_port,
                self.rate_check_seconds,
                self.idle_timeout_seconds,
            )
        finally:
            self._sessions.discard(task)

    async def start(self) -> None:
        """Bind the listening socket."""
        self._server = await asyncio.start_server(
            self._handle, host=self.listen_host, port=self.listen_port
        )
        addrs = ", ".join(str(sock.getsockname()) for sock in self._server.sockets)
        logger.info(
            f"Bridge listening on {addrs}, relaying to "
            f"{self.upstream_host}:{self.upstream_port}"
        )

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port) of the first listening socket."""
        if self._server is None:
            raise RuntimeError("Server not started")
        return self._server.sockets[0].getsockname()[:2]

    @property
    def active_sessions(self) -> int:
        return len(self._sessions)

    async def serve_forever(self) -> None:
        if self._server is None:
            await self.start()
        await self._server.serve_forever()

    async def close(self) -> None:
        """Stop accepting, cancel running sessions and wait for them."""
        if self._server is None:
            return
        self._server.close()
        sessions = list(self._sessions)
        for task in sessions:
            task.cancel()
        await asyncio.gather(*sessions, return_exceptions=True)
        await self._server.wait_closed()
        logger.info("Bridge server shut down.")

    async def __aenter__(self) -> "BridgeServer":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


async def start_server(
    listen_host: str,
    listen_port: int,
    upstream_host: str,
    upstream_port: int,
    rate_check_seconds: int | None = None,
    idle_timeout_seconds: int | None = None,
):
    """
    Start the bridge listener and serve until cancelled.

    Args:
        listen_host: Address to bind to.
        listen_port: Port to listen on.
        upstream_host: Host each client is relayed to.
        upstream_port: Port each client is relayed to.
        rate_check_seconds: Idle check interval; config default if None.
        idle_timeout_seconds: Idle timeout; config default if None.
    """
    server = BridgeServer(
        upstream_host,
        upstream_port,
        listen_host,
        listen_port,
        rate_check_seconds,
        idle_timeout_seconds,
    )
    try:
        async with server:
            await server.serve_forever()

    except asyncio.CancelledError:
        logger.info("Bridge server task cancelled.")
        raise
    except Exception as e:
        logger.critical(
            f"FATAL: Bridge server failed on {listen_host}:{listen_port}: {e}"
        )
        raise
