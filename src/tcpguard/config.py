"""
=============================================================================
CONFIGURATION
=============================================================================

Defaults for the socket layer and the bootstrap entry point, plus logging
setup.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       Priority (highest first)                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. Command line       python -m tcpguard --port 9000              │
    │   2. Environment        TCPGUARD_PORT=9000 python -m tcpguard       │
    │   3. Defaults           SocketConfig() → port 8080                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The socket classes themselves never read configuration: they take plain
arguments. SocketConfig is only a convenient bundle of those arguments.

=============================================================================
"""

import os
import logging
from dataclasses import dataclass


MIN_PORT = 0
MAX_PORT = 65535

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def is_valid_port(port) -> bool:
    """
    Check that `port` is an integer in 0-65535.

    Port 0 is valid: it asks the OS to pick a free port when binding.
    """
    # bool is an int subclass, but True is not a port
    if isinstance(port, bool) or not isinstance(port, int):
        return False
    return MIN_PORT <= port <= MAX_PORT


@dataclass
class SocketConfig:
    """
    Configuration for listeners and connections.

    Attributes:
        host: Address to bind listeners to ("0.0.0.0" = all interfaces).
        port: Port to bind the bootstrap listener to.
        backlog: Pending connections queued before the OS refuses new ones.
        buffer_size: Bytes requested per recv() call.
        log_level: Logging level name.
    """

    host: str = "0.0.0.0"
    port: int = 8080
    backlog: int = 50
    buffer_size: int = 8192
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "SocketConfig":
        """
        Create configuration from environment variables.

        TCPGUARD_HOST         Bind host (default: 0.0.0.0)
        TCPGUARD_PORT         Bind port (default: 8080)
        TCPGUARD_BACKLOG      Listen backlog (default: 50)
        TCPGUARD_BUFFER_SIZE  recv() size in bytes (default: 8192)
        TCPGUARD_LOG_LEVEL    Logging level (default: INFO)
        """
        return cls(
            host=os.getenv("TCPGUARD_HOST", "0.0.0.0"),
            port=int(os.getenv("TCPGUARD_PORT", "8080")),
            backlog=int(os.getenv("TCPGUARD_BACKLOG", "50")),
            buffer_size=int(os.getenv("TCPGUARD_BUFFER_SIZE", "8192")),
            log_level=os.getenv("TCPGUARD_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not is_valid_port(self.port):
            raise ValueError(f"Invalid port: {self.port}. Must be {MIN_PORT}-{MAX_PORT}.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")


def configure_logging(level: str = "INFO") -> None:
    """Configure the root handler and the tcpguard logger level."""
    numeric = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )

    logging.getLogger("tcpguard").setLevel(numeric)
