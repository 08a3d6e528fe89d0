"""
Bridge configuration for tcpbridge.

This module defines the configuration dataclass for the relay server,
providing a centralized place for all configurable parameters.

Configuration can be modified at runtime by importing the global config
instance and updating its attributes before starting the server.

Usage:
    from tcpbridge.config import config

    # Modify configuration before starting
    config.LISTEN_PORT = 9000
    config.IDLE_TIMEOUT_SECONDS = 600
"""

from dataclasses import dataclass

from tcpbridge.models.enums import LogLevel


# =============================================================================
# Configuration Dataclass
# =============================================================================


@dataclass
class BridgeConfig:
    """
    Relay server configuration.

    Attributes:
        LISTEN_HOST: Address the listener binds to.
        LISTEN_PORT: Port the listener binds to.
        UPSTREAM_HOST: Host every accepted client is relayed to.
        UPSTREAM_PORT: Port every accepted client is relayed to.
        RATE_CHECK_SECONDS: How often the idle supervisor polls for traffic.
        IDLE_TIMEOUT_SECONDS: Maximum silence before a session is shut down.
        CONNECT_TIMEOUT_SECONDS: Bound on dialing the upstream.
        CLOSE_TIMEOUT_SECONDS: Bound on flushing a stream while closing it.
        LOG_LEVEL: Logging verbosity level.
    """

    # -------------------------------------------------------------------------
    # Network Configuration
    # -------------------------------------------------------------------------

    LISTEN_HOST: str = "127.0.0.1"
    LISTEN_PORT: int = 9000
    UPSTREAM_HOST: str = ""
    UPSTREAM_PORT: int = 0

    # -------------------------------------------------------------------------
    # Timing Configuration
    # -------------------------------------------------------------------------

    RATE_CHECK_SECONDS: int = 5
    IDLE_TIMEOUT_SECONDS: int = 7200  # 2 hours without bridged traffic
    CONNECT_TIMEOUT_SECONDS: float = 15.0
    CLOSE_TIMEOUT_SECONDS: float = 1.0

    # -------------------------------------------------------------------------
    # Logging Configuration
    # -------------------------------------------------------------------------

    LOG_LEVEL: LogLevel = LogLevel.INFO

    def get_listen_address(self) -> str:
        """Get the listener address as host:port."""
        return f"{self.LISTEN_HOST}:{self.LISTEN_PORT}"

    def get_upstream_address(self) -> str:
        """Get the upstream address as host:port."""
        return f"{self.UPSTREAM_HOST}:{self.UPSTREAM_PORT}"


# Global configuration instance
config = BridgeConfig()
