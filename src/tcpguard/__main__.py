"""
=============================================================================
BOOTSTRAP ENTRY POINT
=============================================================================

Checks that this machine can run a listener on the configured port:

    1. Bind a listening socket on the port
    2. Verify it is bound to exactly that port
    3. Close it

Any deviation raises BootstrapError and the process exits non-zero.

=============================================================================
USAGE
=============================================================================

    # Check the default port (8080)
    python -m tcpguard

    # Custom port
    python -m tcpguard --port 9090

    # From the environment
    TCPGUARD_PORT=9090 TCPGUARD_LOG_LEVEL=DEBUG python -m tcpguard

=============================================================================
"""

import argparse
import logging
from typing import List, Optional

from . import __version__
from .config import LOG_LEVELS, SocketConfig, configure_logging
from .core import ListeningSocket
from .errors import BootstrapError


logger = logging.getLogger(__name__)


def bootstrap(config: SocketConfig) -> None:
    """
    Bind, verify and close one listener.

    Raises:
        BootstrapError: If the socket cannot be created, listens on a
                        different port than requested, or cannot be closed.
    """
    result = ListeningSocket.create(
        config.port,
        host=config.host,
        backlog=config.backlog,
        buffer_size=config.buffer_size,
    )

    if not result:
        msg = f"Unable to create server socket ({result.error.value})"
        logger.error(msg)
        raise BootstrapError(msg)

    listener = result.value

    try:
        if listener.port != config.port:
            msg = f"Server socket listening on port {listener.port} instead of {config.port}"
            logger.error(msg)
            raise BootstrapError(msg)
    finally:
        closed = listener.close()

    if not closed:
        msg = "Unable to close server socket"
        logger.error(msg)
        raise BootstrapError(msg)


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Command-line arguments override environment variables, which override
    the SocketConfig defaults.
    """
    env = SocketConfig.from_env()

    parser = argparse.ArgumentParser(
        prog="tcpguard",
        description="Verify that a TCP listener can be bound and released",
    )

    parser.add_argument(
        "--host", "-H",
        default=env.host,
        help=f"Host to bind to (default: {env.host})",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=env.port,
        help=f"Port to bind to (default: {env.port})",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=list(LOG_LEVELS),
        default=env.log_level.upper(),
        help=f"Logging level (default: {env.log_level.upper()})",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tcpguard {__version__}",
    )

    args = parser.parse_args(argv)

    config = SocketConfig(
        host=args.host,
        port=args.port,
        backlog=env.backlog,
        buffer_size=env.buffer_size,
        log_level=args.log_level,
    )
    config.validate()

    configure_logging(config.log_level)

    bootstrap(config)
    logger.info(f"Bootstrap check passed on port {config.port}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
