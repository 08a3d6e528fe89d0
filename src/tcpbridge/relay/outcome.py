"""Terminal result of a relay session."""

from dataclasses import dataclass

from tcpbridge.models.enums import EndReason
from tcpbridge.relay.exceptions import RelayIOError


@dataclass
class RelayOutcome:
    """
    What happened to a relay session.

    Attributes:
        reason: Why the session ended.
        error: The first genuine read/write failure, if any.
        bytes_client_to_upstream: Bytes forwarded from client to upstream.
        bytes_upstream_to_client: Bytes forwarded from upstream to client.
        duration: Session length in seconds.
    """

    reason: EndReason
    error: RelayIOError | None = None
    bytes_client_to_upstream: int = 0
    bytes_upstream_to_client: int = 0
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        """True unless a genuine I/O error ended the session."""
        return self.error is None

    @property
    def timed_out(self) -> bool:
        return self.reason is EndReason.IDLE_TIMEOUT

    def raise_for_error(self) -> None:
        """Raise the recorded RelayIOError, if there is one."""
        if self.error is not None:
            raise self.error

    def summary(self) -> str:
        text = (
            f"{self.reason.value} after {self.duration:.1f}s, "
            f"{self.bytes_client_to_upstream} bytes client->upstream, "
            f"{self.bytes_upstream_to_client} bytes upstream->client"
        )
        if self.error is not None:
            text += f": {self.error}"
        return text
