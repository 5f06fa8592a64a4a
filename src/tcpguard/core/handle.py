"""
=============================================================================
SOCKET HANDLE BASE
=============================================================================

Behaviour shared by listening and connected sockets: open-state tracking,
timeout configuration and idempotent close.

=============================================================================
HANDLE STATE MACHINE
=============================================================================

    CREATED ──────► OPEN ──────────────► CLOSED
                     │  ▲                  │  ▲
                     │  │ set_timeout()    │  │ close()  (no-op, True)
                     └──┘                  └──┘

The open flag is never cached. It is read from the OS resource itself:
a closed Python socket reports fileno() == -1.

=============================================================================
CONCURRENT CLOSE
=============================================================================

Closing a file descriptor does NOT wake a thread blocked in accept() or
recv() on it. Closing is therefore two steps:

    1. shutdown(SHUT_RDWR)   Wakes blocked accept()/recv() callers
    2. close()               Releases the file descriptor

Handles are NOT thread-safe beyond this. One owner per handle; callers
that share one must lock around it themselves.

=============================================================================
"""

import socket
import logging
from typing import Optional, Union

from ..errors import ErrorKind, InvalidUnitError
from ..result import Result
from ..timeutils import Duration


logger = logging.getLogger(__name__)


def _is_whole_number(value) -> bool:
    # bool is an int subclass, but True is not a duration
    return isinstance(value, int) and not isinstance(value, bool)


class SocketHandle:
    """
    Base class for a single-owner handle over an OS socket.

    Subclasses set `kind` to a short label used in log messages.
    """

    kind = "socket"

    def __init__(self, sock: socket.socket):
        self.socket = sock

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def is_open(self) -> bool:
        """True until the underlying socket is closed."""
        return self.socket.fileno() != -1

    @property
    def timeout_millis(self) -> Optional[int]:
        """Current blocking timeout in milliseconds, or None for no timeout."""
        timeout = self.socket.gettimeout()
        if timeout is None:
            return None
        return round(timeout * 1000)

    # =========================================================================
    # TIMEOUT
    # =========================================================================

    def set_timeout(self, duration: Union[int, Duration]) -> Result[None]:
        """
        Configure the blocking timeout for this socket.

        Args:
            duration: Milliseconds as an int, or a Duration in any
                      supported unit. Anything else (None, str, float,
                      bool) is an INVALID_DURATION.

        Returns:
            An empty successful Result, or a failure with INVALID_UNIT,
            INVALID_DURATION, SOCKET_CLOSED or OPTION_FAILED. On failure the
            existing timeout is left unchanged.
        """
        amount = duration.value if isinstance(duration, Duration) else duration
        if not _is_whole_number(amount):
            logger.error(f"Cannot set {self.kind} timeout: {amount!r} is not a whole number")
            return Result.failure(ErrorKind.INVALID_DURATION)

        if isinstance(duration, Duration):
            try:
                millis = duration.to_milliseconds()
            except InvalidUnitError as e:
                logger.error(f"Cannot set {self.kind} timeout: {e}")
                return Result.failure(ErrorKind.INVALID_UNIT)
        else:
            millis = duration

        if millis <= 0:
            logger.error("Duration cannot be 0 or negative")
            return Result.failure(ErrorKind.INVALID_DURATION)

        if not self.is_open:
            logger.error(f"Cannot set timeout on a closed {self.kind}")
            return Result.failure(ErrorKind.SOCKET_CLOSED)

        try:
            # Python sockets take seconds as a float
            self.socket.settimeout(millis / 1000)
        except OSError as e:
            logger.error(f"Unable to set {self.kind} timeout: {e}")
            return Result.failure(ErrorKind.OPTION_FAILED)

        logger.debug(f"{self.kind.capitalize()} timeout set to {millis}ms")
        return Result.success()

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self) -> bool:
        """
        Close the socket.

        Safe to call any number of times. Never raises.

        Returns:
            True if the socket is closed when the call returns, False if the
            OS reported a failure closing it.
        """
        if not self.is_open:
            return True

        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # Never connected, or the peer is already gone

        try:
            self.socket.close()
        except OSError as e:
            logger.error(f"Unable to close {self.kind}: {e}")
            return False

        logger.info(f"{self.kind.capitalize()} has been closed")
        return not self.is_open

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
