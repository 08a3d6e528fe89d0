"""Per-direction traffic bookkeeping shared between a pump and the supervisor."""

import time
from dataclasses import dataclass


@dataclass
class ActivityClock:
    """
    Last-activity timestamp and byte count for one relay direction.

    Written only by the pump that owns the direction, read by the idle
    supervisor. Timestamps come from ``time.monotonic()``.
    """

    last_activity: float
    bytes_relayed: int = 0
    chunks_relayed: int = 0

    def record(self, nbytes: int, now: float | None = None) -> None:
        """Record a successfully forwarded chunk."""
        self.last_activity = time.monotonic() if now is None else now
        self.bytes_relayed += nbytes
        self.chunks_relayed += 1

    def idle_for(self, now: float | None = None) -> float:
        """Seconds since the last forwarded chunk."""
        if now is None:
            now = time.monotonic()
        return now - self.last_activity
