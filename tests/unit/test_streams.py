"""
Unit tests for the inbound and outbound stream adapters.
"""

import time

import pytest

from tcpguard import (
    ConnectedSocket,
    Duration,
    ErrorKind,
    InboundStream,
    OutboundStream,
    SocketTimeoutError,
)


LOOPBACK = "127.0.0.1"


class TestOpen:
    """Tests for InboundStream.open() / OutboundStream.open()."""

    @pytest.mark.parametrize("stream_type", [InboundStream, OutboundStream])
    def test_open_on_connected_socket(self, connection_pair, stream_type):
        client, server = connection_pair

        for conn in (client, server):
            result = stream_type.open(conn)
            assert result
            assert result.value.conn is conn
            assert not result.value.is_closed

    @pytest.mark.parametrize("stream_type", [InboundStream, OutboundStream])
    def test_open_on_closed_socket(self, connection_pair, stream_type):
        client, _ = connection_pair
        client.close()

        assert stream_type.open(client).error is ErrorKind.STREAM_UNAVAILABLE

    def test_reopen_after_close(self, connection_pair):
        client, server = connection_pair

        assert client.outbound().value.close()
        assert client.outbound().error is ErrorKind.STREAM_UNAVAILABLE
        assert client.inbound()

        assert server.inbound().value.close()
        assert server.inbound().error is ErrorKind.STREAM_UNAVAILABLE

    def test_inbound_close_ends_outbound_too(self, connection_pair):
        client, _ = connection_pair

        assert client.inbound().value.close()

        assert client.is_input_shutdown
        assert client.is_output_shutdown
        assert client.outbound().error is ErrorKind.STREAM_UNAVAILABLE
        assert client.is_open

    def test_open_reads_nothing(self, connection_pair):
        client, server = connection_pair
        out = client.outbound().unwrap()
        out.write("abc")

        server.inbound().unwrap()
        out.close()

        assert server.inbound().unwrap().read_all() == b"abc"


class TestReadAll:
    """Tests for InboundStream.read_all()."""

    def test_read_until_end_of_stream(self, connection_pair):
        client, server = connection_pair
        out = client.outbound().unwrap()

        assert out.write("hello ") == 6
        assert out.write("world") == 5
        assert out.close()

        assert server.inbound().unwrap().read_all() == b"hello world"

    def test_read_larger_than_buffer(self, connection_pair, background):
        client, server = connection_pair
        payload = bytes(range(256)) * 200   # 51200 bytes, several recv() calls

        call = background(server.inbound().unwrap().read_all)

        out = client.outbound().unwrap()
        assert out.write_bytes(payload) == len(payload)
        assert out.close()

        assert call.join(timeout=5.0)
        assert call.result == payload

    def test_timeout_raises(self, connection_pair):
        _, server = connection_pair
        assert server.set_timeout(Duration.seconds(1))
        stream = server.inbound().unwrap()

        start = time.monotonic()
        with pytest.raises(SocketTimeoutError):
            stream.read_all()
        elapsed = time.monotonic() - start

        assert 0.8 <= elapsed < 3.0

    def test_timeout_is_builtin_timeout_error(self, connection_pair):
        _, server = connection_pair
        server.set_timeout(100)

        with pytest.raises(TimeoutError):
            server.inbound().unwrap().read_all()

    def test_timeout_keeps_partial_data(self, connection_pair):
        client, server = connection_pair
        client.outbound().unwrap().write("abc")
        server.set_timeout(300)

        with pytest.raises(SocketTimeoutError) as exc_info:
            server.inbound().unwrap().read_all()

        assert exc_info.value.partial == b"abc"

    def test_read_after_socket_closed(self, connection_pair):
        _, server = connection_pair
        stream = server.inbound().unwrap()
        server.close()

        assert stream.is_closed
        assert stream.read_all() == b""

    def test_read_after_stream_closed(self, connection_pair):
        client, server = connection_pair
        client.outbound().unwrap().write("ignored")
        stream = server.inbound().unwrap()
        stream.close()

        assert stream.read_all() == b""


class TestWrite:
    """Tests for OutboundStream.write() / write_bytes()."""

    @pytest.mark.parametrize("text", ["", "   ", "\t\n"])
    def test_blank_text_sends_nothing(self, connection_pair, text: str):
        client, server = connection_pair
        out = client.outbound().unwrap()

        assert out.write(text) == 0
        assert out.close()

        # Peer sees end-of-stream with no data
        assert server.inbound().unwrap().read_all() == b""

    def test_utf8_encoding(self, connection_pair):
        client, server = connection_pair
        out = client.outbound().unwrap()

        written = out.write("héllo ✓")
        out.close()

        assert written == len("héllo ✓".encode("utf-8"))
        assert server.inbound().unwrap().read_all().decode("utf-8") == "héllo ✓"

    def test_empty_bytes(self, connection_pair):
        client, _ = connection_pair

        assert client.outbound().unwrap().write_bytes(b"") == 0

    def test_write_after_socket_closed(self, connection_pair):
        client, _ = connection_pair
        out = client.outbound().unwrap()
        client.close()

        assert out.write("data") == 0

    def test_write_after_stream_closed(self, connection_pair):
        client, _ = connection_pair
        out = client.outbound().unwrap()
        out.close()

        assert out.write("data") == 0

    def test_write_timeout_raises(self, connection_pair):
        client, _ = connection_pair
        client.set_timeout(200)
        out = client.outbound().unwrap()

        # Nobody reads on the other end, so the kernel buffers fill up
        with pytest.raises(SocketTimeoutError):
            out.write_bytes(b"x" * (64 * 1024 * 1024))


class TestClose:
    """Tests for stream close()."""

    @pytest.mark.parametrize("opener", ["inbound", "outbound"])
    def test_close_is_idempotent(self, connection_pair, opener: str):
        client, _ = connection_pair
        stream = getattr(client, opener)().unwrap()

        assert stream.close() is True
        assert stream.is_closed
        assert stream.close() is True

        # The socket itself stays open
        assert client.is_open

    @pytest.mark.parametrize("opener", ["inbound", "outbound"])
    def test_close_after_socket_closed(self, connection_pair, opener: str):
        client, _ = connection_pair
        stream = getattr(client, opener)().unwrap()
        client.close()

        assert stream.close() is True

    @pytest.mark.parametrize("stream_type", [InboundStream, OutboundStream])
    def test_close_failure_reported(self, failing_socket, stream_type):
        conn = ConnectedSocket(failing_socket, (LOOPBACK, 4000))
        stream = stream_type.open(conn).unwrap()

        assert stream.close() is False
        assert stream.close() is False
        assert not stream.is_closed


class TestUnblocking:
    """A blocked read must not outlive a close."""

    def test_peer_closing_outbound_unblocks_read(self, connection_pair, background):
        client, server = connection_pair

        call = background(server.inbound().unwrap().read_all)
        time.sleep(0.2)
        client.outbound().unwrap().close()

        assert call.join(timeout=5.0), "read_all() stayed blocked"
        assert call.result == b""

    def test_closing_inbound_unblocks_read(self, connection_pair, background):
        _, server = connection_pair
        stream = server.inbound().unwrap()

        call = background(stream.read_all)
        time.sleep(0.2)
        assert stream.close()

        assert call.join(timeout=5.0), "read_all() stayed blocked"
        assert call.error is None
        assert call.result == b""

    def test_closing_inbound_unblocks_peer_read(self, connection_pair, background):
        client, server = connection_pair

        call = background(client.inbound().unwrap().read_all)
        time.sleep(0.2)
        assert server.inbound().unwrap().close()

        assert call.join(timeout=5.0), "peer read_all() stayed blocked"
        assert call.error is None
        assert call.result == b""
        assert server.is_open

    def test_closing_socket_unblocks_read(self, connection_pair, background):
        _, server = connection_pair

        call = background(server.inbound().unwrap().read_all)
        time.sleep(0.2)
        assert server.close()

        assert call.join(timeout=5.0), "read_all() stayed blocked"
        assert call.error is None
        assert call.result == b""

    def test_peer_socket_close_unblocks_read(self, connection_pair, background):
        client, server = connection_pair

        call = background(client.inbound().unwrap().read_all)
        time.sleep(0.2)
        assert server.close()

        assert call.join(timeout=5.0), "read_all() stayed blocked"
        assert call.result == b""
