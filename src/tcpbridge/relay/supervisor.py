"""
Idle supervisor.

Polls the activity clocks of both relay directions and shuts the session
down once no bytes have crossed in either direction for ``idle_timeout``
seconds. Traffic in one direction alone keeps the whole session alive.
"""

import asyncio
import time
from typing import Callable, Sequence

from tcpbridge.relay.activity import ActivityClock
from tcpbridge.utils.logger import get_logger

logger = get_logger(__name__)


class IdleSupervisor:
    """Enforces the traffic-based idle timeout of one relay session."""

    def __init__(
        self,
        clocks: Sequence[ActivityClock],
        rate_check_interval: float,
        idle_timeout: float,
        on_idle: Callable[[], None],
        log_prefix: str = "",
    ):
        """
        Initialize the supervisor.

        Args:
            clocks: Activity clocks of both directions.
            rate_check_interval: Seconds between idle checks.
            idle_timeout: Seconds of whole-session silence before shutdown.
            on_idle: Called once when the timeout fires; must unblock pumps.
            log_prefix: Prefix for log messages.
        """
        self.clocks = list(clocks)
        self.rate_check_interval = rate_check_interval
        self.idle_timeout = idle_timeout
        self.on_idle = on_idle
        self.log_prefix = log_prefix
        self.timed_out = False
        self._stopped = asyncio.Event()

    def idle_time(self, now: float | None = None) -> float:
        """Seconds since the most recent activity in either direction."""
        if now is None:
            now = time.monotonic()
        return min(clock.idle_for(now) for clock in self.clocks)

    def stop(self) -> None:
        """Ask the supervisor to exit at its next wake-up."""
        self._stopped.set()

    async def run(self) -> bool:
        """
        Poll until the session is idle or the supervisor is stopped.

        Returns:
            True if the idle timeout fired, False if stopped first.
        """
        while not self._stopped.is_set():
            try:
                await asyncio.wait_for(
                    self._stopped.wait(), timeout=self.rate_check_interval
                )
            except asyncio.TimeoutError:
                pass
            else:
                break

            idle = self.idle_time()
            if idle >= self.idle_timeout:
                logger.info(
                    f"{self.log_prefix} No traffic for {idle:.1f}s "
                    f"(limit {self.idle_timeout}s). Shutting down."
                )
                self.timed_out = True
                self.on_idle()
                return True

            logger.trace(f"{self.log_prefix} Idle for {idle:.1f}s.")

        return False
