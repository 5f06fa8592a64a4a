"""
=============================================================================
STREAM ADAPTERS
=============================================================================

Byte-level I/O on a ConnectedSocket, one direction per adapter.

    ┌──────────────────────┐                    ┌──────────────────────┐
    │  client              │                    │  server              │
    │                      │                    │                      │
    │  OutboundStream ─────┼──── bytes ───────► │ ───► InboundStream   │
    │                      │                    │                      │
    │  InboundStream ◄─────┼──── bytes ──────── │ ◄─── OutboundStream  │
    └──────────────────────┘                    └──────────────────────┘

An adapter is a VIEW: it does not own the socket. Closing the socket makes
every adapter on it unusable, and using one afterwards degrades quietly
(empty read, nothing written) instead of raising.

Closing an OutboundStream ends only the write direction. Closing an
InboundStream ends both, so the peer learns we are gone:

    here:   inbound.close()   →  shutdown(SHUT_RDWR)   (sends FIN)
    peer:   read_all()        →  returns

=============================================================================
TCP IS A BYTE STREAM
=============================================================================

There are no message boundaries. read_all() reads until the peer closes
its sending side (end-of-stream), so the peer must close its outbound
stream (or the whole socket) for a read to complete:

    peer:   write("hello")  →  close outbound   (sends FIN)
    here:   read_all()      →  b"hello"

=============================================================================
TIMEOUTS ARE NOT FAILURES
=============================================================================

    read_all() / write()
        │
        ├── Success            → bytes / count written
        ├── Timed out          → raise SocketTimeoutError
        └── Any other OSError  → b"" / 0 (logged)

A timeout is expected and recoverable, so it stays visible. Everything
else means "no data" and the caller moves on.

Note that b"" from read_all() means EITHER end-of-stream with nothing sent
OR a read failure. The two are not told apart.

=============================================================================
"""

import socket
import logging
from typing import TYPE_CHECKING, List

from ..errors import ErrorKind, SocketTimeoutError
from ..result import Result

if TYPE_CHECKING:
    from .connected import ConnectedSocket


logger = logging.getLogger(__name__)


class InboundStream:
    """
    The read direction of a ConnectedSocket.

    Usage:
        stream = InboundStream.open(conn).unwrap()
        try:
            data = stream.read_all()
        except SocketTimeoutError as e:
            data = e.partial
        stream.close()
    """

    def __init__(self, conn: "ConnectedSocket"):
        self.conn = conn
        self._closed = False

    @classmethod
    def open(cls, conn: "ConnectedSocket") -> Result["InboundStream"]:
        """
        Get the read direction of `conn`.

        Returns:
            A Result holding the stream, or failing with STREAM_UNAVAILABLE
            if the socket is closed or its input was already shut down.
        """
        if not conn.is_open:
            logger.error("Unable to get client socket input stream: socket is closed")
            return Result.failure(ErrorKind.STREAM_UNAVAILABLE)

        if conn.is_input_shutdown:
            logger.error("Unable to get client socket input stream: input is shutdown")
            return Result.failure(ErrorKind.STREAM_UNAVAILABLE)

        return Result.success(cls(conn))

    @property
    def is_closed(self) -> bool:
        return self._closed or not self.conn.is_open or self.conn.is_input_shutdown

    def read_all(self) -> bytes:
        """
        Read everything until the peer closes its sending side.

        Returns:
            The bytes read. Empty if the peer sent nothing, or if reading
            failed for any reason other than a timeout.

        Raises:
            SocketTimeoutError: If the socket's timeout elapsed first. Bytes
                                read before that are in its `partial`.
        """
        if self.is_closed:
            logger.warning("Unable to read from client socket input stream: stream is closed")
            return b""

        chunks: List[bytes] = []

        try:
            while True:
                chunk = self.conn.socket.recv(self.conn.buffer_size)
                if not chunk:
                    break  # End-of-stream
                chunks.append(chunk)
        except socket.timeout:
            raise SocketTimeoutError(
                f"Read timed out after {self.conn.timeout_millis}ms",
                partial=b"".join(chunks),
            ) from None
        except OSError as e:
            logger.warning(f"Unable to read from client socket input stream: {e}")
            return b""

        return b"".join(chunks)

    def close(self) -> bool:
        """
        Close the read direction and, with it, the connection's streams.

        Wakes any thread blocked in read_all() on this socket, and sends
        end-of-stream so a peer blocked reading from us wakes too. The
        socket itself stays open until closed. Idempotent.

        Returns:
            True if the streams are closed, False if the OS reported a
            failure (a later close() tries again).
        """
        if self._closed:
            return True

        if not self.conn.shutdown_streams():
            return False

        self._closed = True
        return True


class OutboundStream:
    """
    The write direction of a ConnectedSocket.

    Usage:
        stream = OutboundStream.open(conn).unwrap()
        stream.write("hello")
        stream.close()   # Peer's read_all() returns b"hello"
    """

    def __init__(self, conn: "ConnectedSocket"):
        self.conn = conn
        self._closed = False

    @classmethod
    def open(cls, conn: "ConnectedSocket") -> Result["OutboundStream"]:
        """
        Get the write direction of `conn`.

        Returns:
            A Result holding the stream, or failing with STREAM_UNAVAILABLE
            if the socket is closed or its output was already shut down.
        """
        if not conn.is_open:
            logger.error("Unable to get client socket output stream: socket is closed")
            return Result.failure(ErrorKind.STREAM_UNAVAILABLE)

        if conn.is_output_shutdown:
            logger.error("Unable to get client socket output stream: output is shutdown")
            return Result.failure(ErrorKind.STREAM_UNAVAILABLE)

        return Result.success(cls(conn))

    @property
    def is_closed(self) -> bool:
        return self._closed or not self.conn.is_open or self.conn.is_output_shutdown

    def write(self, text: str) -> int:
        """
        Write `text` as UTF-8.

        Blank text (empty or whitespace only) is not sent at all.

        Returns:
            Number of bytes written: all of them, or 0.

        Raises:
            SocketTimeoutError: If the socket's timeout elapsed while
                                writing.
        """
        if not text or text.isspace():
            return 0

        return self.write_bytes(text.encode("utf-8"))

    def write_bytes(self, data: bytes) -> int:
        """
        Write raw bytes in one sendall().

        Returns:
            len(data) on success, 0 on failure or empty input.

        Raises:
            SocketTimeoutError: If the socket's timeout elapsed while
                                writing.
        """
        if not data:
            return 0

        if self.is_closed:
            logger.warning("Unable to write to client socket output stream: stream is closed")
            return 0

        try:
            # sendall() loops until every byte is handed to the kernel
            self.conn.socket.sendall(data)
        except socket.timeout:
            raise SocketTimeoutError(
                f"Write timed out after {self.conn.timeout_millis}ms"
            ) from None
        except OSError as e:
            logger.warning(f"Unable to write to client socket output stream: {e}")
            return 0

        return len(data)

    def close(self) -> bool:
        """
        Close the write direction. The peer's reads see end-of-stream.

        Idempotent.

        Returns:
            True if the direction is closed, False if the OS reported a
            failure (a later close() tries again).
        """
        if self._closed:
            return True

        if not self.conn.shutdown_output():
            return False

        self._closed = True
        return True
