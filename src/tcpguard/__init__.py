"""
=============================================================================
TCPGUARD - TCP Sockets Without Surprise Exceptions
=============================================================================

A thin layer over Python's socket module where failures are values:

    from tcpguard import ListeningSocket, ConnectedSocket, Duration

    listener = ListeningSocket.create(9090).unwrap()
    client = ConnectedSocket.connect("localhost", 9090).unwrap()
    server = listener.accept().unwrap()

    out = client.outbound().unwrap()
    out.write("M")
    out.close()                              # Server sees end-of-stream

    server.set_timeout(Duration.seconds(1))
    data = server.inbound().unwrap().read_all()   # b"M"

    for handle in (client, server, listener):
        handle.close()

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    tcpguard/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # Bootstrap check (python -m tcpguard)
    ├── config.py            # SocketConfig, logging setup
    ├── errors.py            # ErrorKind and exception classes
    ├── result.py            # Result value type
    ├── timeutils.py         # Duration → milliseconds
    └── core/
        ├── handle.py        # Shared open/timeout/close behaviour
        ├── listening.py     # ListeningSocket
        ├── connected.py     # ConnectedSocket
        └── streams.py       # InboundStream, OutboundStream

=============================================================================
"""

__version__ = "1.0.0"

from .config import SocketConfig, configure_logging
from .core import ConnectedSocket, InboundStream, ListeningSocket, OutboundStream
from .errors import (
    BootstrapError,
    ErrorKind,
    InvalidUnitError,
    ResultError,
    SocketTimeoutError,
    TcpGuardError,
)
from .result import Result
from .timeutils import Duration, TimeUnit, convert_to_milliseconds

__all__ = [
    "ListeningSocket",
    "ConnectedSocket",
    "InboundStream",
    "OutboundStream",
    "Result",
    "ErrorKind",
    "TcpGuardError",
    "ResultError",
    "InvalidUnitError",
    "SocketTimeoutError",
    "BootstrapError",
    "Duration",
    "TimeUnit",
    "convert_to_milliseconds",
    "SocketConfig",
    "configure_logging",
    "__version__",
]
