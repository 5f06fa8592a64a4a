"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every public operation in this package reports failure as a value, not an
exception. This module defines the vocabulary those values use, plus the
small set of exceptions that DO cross the boundary.

=============================================================================
WHAT CROSSES THE BOUNDARY?
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                 Failure                 │   Reported as             │
    ├─────────────────────────────────────────┼───────────────────────────┤
    │  Bad port / duration / unit             │   Result(error=INVALID_*) │
    │  bind() / connect() / accept() failed   │   Result(error=*_FAILED)  │
    │  accept() timed out                     │   Result(ACCEPT_TIMEOUT)  │
    │  Stream on a closed socket              │   Result(STREAM_...)      │
    │  close() failed                         │   False                   │
    │  read / write timed out                 │   raise SocketTimeoutError│
    │  Any other read / write failure         │   b"" / 0                 │
    └─────────────────────────────────────────────────────────────────────┘

Timeouts are the one condition a caller must be able to tell apart from a
permanent failure: a polling loop keeps waiting on a timeout but gives up
on a dead connection.

=============================================================================
"""

from enum import Enum


class ErrorKind(Enum):
    """Why an operation did not happen."""

    # Validation: detected before any OS call
    INVALID_PORT = "invalid_port"
    INVALID_DURATION = "invalid_duration"
    INVALID_UNIT = "invalid_unit"

    # Transport: the OS refused, the cause is logged
    BIND_FAILED = "bind_failed"
    CONNECT_FAILED = "connect_failed"
    ACCEPT_FAILED = "accept_failed"
    ACCEPT_TIMEOUT = "accept_timeout"
    STREAM_UNAVAILABLE = "stream_unavailable"
    CLOSE_FAILED = "close_failed"

    # Handle state
    SOCKET_CLOSED = "socket_closed"
    OPTION_FAILED = "option_failed"


class TcpGuardError(Exception):
    """Base class for exceptions raised by this package."""


class ResultError(TcpGuardError):
    """
    Raised when unwrapping a failed Result.

    Attributes:
        kind: The ErrorKind the Result carried.
    """

    def __init__(self, kind: ErrorKind, message: str = ""):
        self.kind = kind
        super().__init__(message or f"Operation failed: {kind.value}")


class InvalidUnitError(TcpGuardError, ValueError):
    """Raised when a duration unit cannot be converted to milliseconds."""


class SocketTimeoutError(TcpGuardError, TimeoutError):
    """
    A blocking read or write exceeded the socket's configured timeout.

    Subclasses the builtin TimeoutError, so callers may catch either.

    Attributes:
        partial: Bytes that arrived before the timeout (reads only).
    """

    def __init__(self, message: str = "Socket operation timed out", partial: bytes = b""):
        super().__init__(message)
        self.partial = partial


class BootstrapError(TcpGuardError, OSError):
    """Fatal condition raised by the bootstrap entry point."""
