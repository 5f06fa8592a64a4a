"""
=============================================================================
CORE SOCKET COMPONENTS
=============================================================================

The socket lifecycle and I/O boundary layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  ListeningSocket    bind, listen, accept, close                      │
    └─────────────────────────────────┬───────────────────────────────────┘
                                      │ accept()
                                      ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  ConnectedSocket    connect, set_timeout, half-close, close          │
    └─────────────────────────────────┬───────────────────────────────────┘
                                      │ inbound() / outbound()
                                      ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  InboundStream      read_all                                         │
    │  OutboundStream     write, write_bytes                               │
    └─────────────────────────────────────────────────────────────────────┘

Nothing here raises on failure except a read/write timeout; every other
problem comes back as a Result, a bool, b"" or 0.

=============================================================================
"""

from .handle import SocketHandle
from .connected import ConnectedSocket
from .listening import ListeningSocket
from .streams import InboundStream, OutboundStream

__all__ = [
    "SocketHandle",     # Shared open-state, timeout and close behaviour
    "ListeningSocket",  # Bound server socket - hands out connections
    "ConnectedSocket",  # One end of a TCP connection
    "InboundStream",    # Read direction of a connection
    "OutboundStream",   # Write direction of a connection
]
