"""
=============================================================================
LISTENING SOCKETS
=============================================================================

A listening socket is bound to a local port and hands out one connected
socket per incoming client. It never carries data itself.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create a TCP socket
    2. bind()      Reserve HOST:PORT for this socket
    3. listen()    Let the OS queue incoming connections
    4. accept()    Take one queued connection → NEW socket for that client
                   (the listener keeps listening)
    5. close()     Release the port

                    ┌───────────────────────┐
                    │   ListeningSocket     │ ◄── ListeningSocket.create()
                    │   bound to :8080      │
                    └───────────┬───────────┘
                                │ accept()
                ┌───────────────┼───────────────┐
                ▼               ▼               ▼
        ┌───────────────┐ ┌───────────────┐ ┌───────────────┐
        │ConnectedSocket│ │ConnectedSocket│ │ConnectedSocket│
        │  client A     │ │  client B     │ │  client C     │
        └───────────────┘ └───────────────┘ └───────────────┘

=============================================================================
ADDRESS REUSE
=============================================================================

SO_REUSEADDR lets a port be bound again right after its previous listener
closed, instead of waiting out TIME_WAIT (~60 seconds).

SO_REUSEPORT is deliberately NOT set. It would let a second listener bind
a port that is already listening, and binding a busy port must fail.

On Windows, SO_REUSEADDR means something else entirely (it allows stealing
a busy port), so SO_EXCLUSIVEADDRUSE is used there instead.

=============================================================================
ADDRESS FAMILY
=============================================================================

The family comes from the host, so "::1" or "::" gives an IPv6 listener
and "0.0.0.0" or "127.0.0.1" an IPv4 one.

=============================================================================
"""

import socket
import logging
from typing import Tuple

from ..config import is_valid_port
from ..errors import ErrorKind
from ..result import Result
from .connected import ConnectedSocket, DEFAULT_BUFFER_SIZE
from .handle import SocketHandle


logger = logging.getLogger(__name__)


DEFAULT_HOST = "0.0.0.0"
DEFAULT_BACKLOG = 50


class ListeningSocket(SocketHandle):
    """
    A bound, listening TCP socket.

    Usage:
        listener = ListeningSocket.create(8080).unwrap()
        listener.set_timeout(Duration.seconds(5))

        result = listener.accept()
        if result:
            conn = result.value
        elif result.error is ErrorKind.ACCEPT_TIMEOUT:
            ...  # Nobody connected yet, try again

        listener.close()
    """

    kind = "server socket"

    def __init__(
        self,
        sock: socket.socket,
        port: int,
        host: str = DEFAULT_HOST,
        backlog: int = DEFAULT_BACKLOG,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ):
        """
        Wrap an already-listening socket.

        Use ListeningSocket.create() rather than calling this directly.

        Args:
            sock: The bound, listening socket.
            port: The port it is bound to.
            host: The address it is bound to.
            backlog: The listen() backlog used.
            buffer_size: recv() size for accepted connections.
        """
        super().__init__(sock)
        self.port = port
        self.host = host
        self.backlog = backlog
        self.buffer_size = buffer_size

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port)."""
        return (self.host, self.port)

    @classmethod
    def create(
        cls,
        port: int,
        host: str = DEFAULT_HOST,
        backlog: int = DEFAULT_BACKLOG,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> Result["ListeningSocket"]:
        """
        Bind and listen on `port`.

        Args:
            port: 0-65535. 0 lets the OS pick a free port.
            host: Local address to bind (default: all interfaces).
            backlog: Connections queued before the OS refuses new ones.
            buffer_size: recv() size for accepted connections.

        Returns:
            A Result holding the open listener, or failing with
            INVALID_PORT (no OS call made) or BIND_FAILED.
        """
        if not is_valid_port(port):
            logger.error(f"Cannot create server socket as port {port!r} is out of bounds")
            return Result.failure(ErrorKind.INVALID_PORT)

        try:
            # Picks the address family from the host: "::1" is IPv6
            family, socktype, proto, _, sockaddr = socket.getaddrinfo(
                host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE
            )[0]
            sock = socket.socket(family, socktype, proto)
        except OSError as e:
            logger.error(f"Unable to create server socket for {host}:{port}: {e}")
            return Result.failure(ErrorKind.BIND_FAILED)

        try:
            if hasattr(socket, "SO_EXCLUSIVEADDRUSE"):
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_EXCLUSIVEADDRUSE, 1)
            else:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

            # Common errors:
            # - Address already in use: another listener has this port
            # - Permission denied: ports < 1024 require root
            sock.bind(sockaddr)
            sock.listen(backlog)
            bound_port = sock.getsockname()[1]
        except OSError as e:
            logger.error(f"Unable to create server socket on {host}:{port}: {e}")
            sock.close()
            return Result.failure(ErrorKind.BIND_FAILED)

        logger.info(f"Server started: {host}:{bound_port}")

        return Result.success(cls(sock, bound_port, host, backlog, buffer_size))

    def accept(self) -> Result[ConnectedSocket]:
        """
        Wait for a client and accept its connection.

        Blocks until a client connects, the timeout set with set_timeout()
        elapses, or another thread closes this listener.

        Returns:
            A Result holding the server's end of the new connection, or
            failing with ACCEPT_TIMEOUT or ACCEPT_FAILED.
        """
        if not self.is_open:
            logger.warning("Unable to accept a connection: server socket is closed")
            return Result.failure(ErrorKind.ACCEPT_FAILED)

        try:
            client_socket, client_address = self.socket.accept()
        except socket.timeout:
            logger.warning(f"No client connected within {self.timeout_millis}ms")
            return Result.failure(ErrorKind.ACCEPT_TIMEOUT)
        except OSError as e:
            # Also where a concurrent close() lands
            logger.warning(f"Unable to make a connection to the client: {e}")
            return Result.failure(ErrorKind.ACCEPT_FAILED)

        try:
            conn = ConnectedSocket(client_socket, client_address, buffer_size=self.buffer_size)
        except OSError as e:
            # The client may reset before its socket is fully wrapped
            logger.warning(f"Client {client_address[0]}:{client_address[1]} dropped while accepting: {e}")
            client_socket.close()
            return Result.failure(ErrorKind.ACCEPT_FAILED)

        logger.info(f"Client connected: {client_address[0]}:{client_address[1]}")
        return Result.success(conn)
