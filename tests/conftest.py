"""
pytest configuration and fixtures.
"""

import errno
import socket
import threading
from typing import Callable, Generator, Tuple
from unittest.mock import MagicMock
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tcpguard import ConnectedSocket, ListeningSocket


LOOPBACK = "127.0.0.1"


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((LOOPBACK, 0))
        return s.getsockname()[1]


@pytest.fixture
def listener() -> Generator[ListeningSocket, None, None]:
    """A listening socket on an OS-assigned loopback port."""
    server = ListeningSocket.create(0, host=LOOPBACK).unwrap()
    yield server
    assert server.close(), "Unable to close server connection"


@pytest.fixture
def connection_pair(listener: ListeningSocket) -> Generator[Tuple[ConnectedSocket, ConnectedSocket], None, None]:
    """
    A connected (client, server) pair.

    connect() completes against the listen backlog before accept() runs,
    so no extra thread is needed.
    """
    client = ConnectedSocket.connect(LOOPBACK, listener.port).unwrap()
    server = listener.accept().unwrap()

    yield client, server

    client.close()
    server.close()


class BackgroundCall:
    """Run a blocking call in a daemon thread and collect its outcome."""

    def __init__(self, func: Callable, *args):
        self.result = None
        self.error = None
        self._thread = threading.Thread(target=self._run, args=(func, args), daemon=True)

    def _run(self, func, args):
        try:
            self.result = func(*args)
        except BaseException as e:
            self.error = e

    def start(self) -> "BackgroundCall":
        self._thread.start()
        return self

    def join(self, timeout: float) -> bool:
        """Wait for the call; True if it finished within `timeout` seconds."""
        self._thread.join(timeout)
        return not self._thread.is_alive()


@pytest.fixture
def background() -> Callable[..., BackgroundCall]:
    """Start a blocking call in a background thread: background(func, *args)."""
    def start(func: Callable, *args) -> BackgroundCall:
        return BackgroundCall(func, *args).start()
    return start


@pytest.fixture
def failing_socket() -> MagicMock:
    """A stand-in OS socket that stays open and fails to close."""
    sock = MagicMock(spec=socket.socket)
    sock.fileno.return_value = 7
    sock.getsockname.return_value = (LOOPBACK, 5555)
    sock.gettimeout.return_value = None
    sock.close.side_effect = OSError(errno.EIO, "Input/output error")
    sock.shutdown.side_effect = OSError(errno.EIO, "Input/output error")
    return sock
