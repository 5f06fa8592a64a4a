"""
=============================================================================
CONNECTED SOCKETS
=============================================================================

A connected socket is one end of an established TCP connection. It comes
from one of two places:

    CLIENT ROLE                              SERVER ROLE
    ───────────                              ───────────
    ConnectedSocket.connect(host, port)      ListeningSocket.accept()
              │                                        │
              └──────────────► ConnectedSocket ◄───────┘
                                     │
                     ┌───────────────┴───────────────┐
                     ▼                               ▼
              InboundStream                   OutboundStream
              (read direction)                (write direction)

=============================================================================
HALF-CLOSE
=============================================================================

TCP lets each direction be closed on its own:

    shutdown(SHUT_WR)   "I'm done sending"   → peer's reads see EOF
    shutdown(SHUT_RD)   "I'm done receiving" → my blocked reads return

Closing an OutboundStream closes just the write direction, so this side
can still read the peer's answer.

Closing an InboundStream shuts BOTH directions down. SHUT_RD alone sends
nothing, and a peer blocked reading from us would wait forever. The file
descriptor itself stays open until the socket is closed.

=============================================================================
"""

import errno
import socket
import logging
from typing import Optional, Tuple

from ..config import is_valid_port
from ..errors import ErrorKind
from ..result import Result
from .handle import SocketHandle
from .streams import InboundStream, OutboundStream


logger = logging.getLogger(__name__)


DEFAULT_BUFFER_SIZE = 8192


class ConnectedSocket(SocketHandle):
    """
    One end of an established TCP connection.

    Attributes:
        socket: The underlying socket.
        remote_address: Peer (host, port).
        local_port: Port of this end.
        buffer_size: Bytes requested per recv() call.
    """

    kind = "client socket"

    def __init__(
        self,
        sock: socket.socket,
        remote_address: Optional[Tuple[str, int]],
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ):
        super().__init__(sock)
        # IPv6 peers report (host, port, flowinfo, scope_id)
        self.remote_address = tuple(remote_address[:2]) if remote_address else None
        self.buffer_size = buffer_size
        self.local_port = sock.getsockname()[1]
        self._input_shutdown = False
        self._output_shutdown = False

    @classmethod
    def connect(
        cls,
        host: str,
        port: int,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> Result["ConnectedSocket"]:
        """
        Open a connection to a listening socket.

        No timeout applies to the connection attempt or to the returned
        socket; use set_timeout() afterwards.

        Args:
            host: Hostname or literal address of the server.
            port: Server port, 0-65535.
            buffer_size: Bytes requested per recv() call.

        Returns:
            A Result holding the connected socket, or failing with
            INVALID_PORT or CONNECT_FAILED (DNS failure, refused,
            unreachable: the cause is only logged).
        """
        if not is_valid_port(port):
            logger.error(f"Cannot create socket as port {port!r} is out of bounds")
            return Result.failure(ErrorKind.INVALID_PORT)

        try:
            # Tries every address the host resolves to (IPv6 and IPv4)
            sock = socket.create_connection((host, port))
        except OSError as e:
            logger.error(f"Failed to connect to server at {host}:{port}. Error: {e}")
            return Result.failure(ErrorKind.CONNECT_FAILED)

        try:
            # The peer may reset before we get to ask who it is
            conn = cls(sock, sock.getpeername(), buffer_size)
        except OSError as e:
            logger.error(f"Connection to {host}:{port} dropped right after connecting: {e}")
            sock.close()
            return Result.failure(ErrorKind.CONNECT_FAILED)

        logger.info(f"Successfully connected to server at {host}:{port}")
        return Result.success(conn)

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def is_connected(self) -> bool:
        """True while open and attached to a peer."""
        return self.is_open and self.remote_address is not None

    @property
    def is_input_shutdown(self) -> bool:
        return self._input_shutdown

    @property
    def is_output_shutdown(self) -> bool:
        return self._output_shutdown

    # =========================================================================
    # HALF-CLOSE
    # =========================================================================

    def shutdown_input(self) -> bool:
        """
        Stop the read direction. Wakes a reader blocked on this socket.

        Nothing is sent to the peer: TCP has no "stopped reading" signal.
        """
        if self._input_shutdown:
            return True
        if self._shutdown(socket.SHUT_RD, "input"):
            self._input_shutdown = True
            return True
        return False

    def shutdown_output(self) -> bool:
        """Stop the write direction. The peer's reads see end-of-stream."""
        if self._output_shutdown:
            return True
        if self._shutdown(socket.SHUT_WR, "output"):
            self._output_shutdown = True
            return True
        return False

    def shutdown_streams(self) -> bool:
        """
        Stop both directions without releasing the socket.

        Wakes a reader blocked on this socket AND the peer's readers, which
        see end-of-stream.
        """
        if self._input_shutdown and self._output_shutdown:
            return True
        if self._shutdown(socket.SHUT_RDWR, "input and output"):
            self._input_shutdown = True
            self._output_shutdown = True
            return True
        return False

    def _shutdown(self, how: int, direction: str) -> bool:
        """
        Shut down one or both directions of the connection.

        A closed socket has no directions left to shut, so that counts as
        success, as does a peer that already disconnected (ENOTCONN).
        """
        if not self.is_open:
            return True

        try:
            self.socket.shutdown(how)
        except OSError as e:
            if e.errno == errno.ENOTCONN:
                return True
            logger.error(f"Unable to close client socket {direction} stream: {e}")
            return False

        logger.debug(f"Client socket {direction} stream closed")
        return True

    # =========================================================================
    # STREAMS
    # =========================================================================

    def inbound(self) -> Result[InboundStream]:
        """Shortcut for InboundStream.open(self)."""
        return InboundStream.open(self)

    def outbound(self) -> Result[OutboundStream]:
        """Shortcut for OutboundStream.open(self)."""
        return OutboundStream.open(self)

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<ConnectedSocket {self.remote_address} local_port={self.local_port} {state}>"
