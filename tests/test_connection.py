"""
Tests for connections and the top level check
"""

import socket

import pytest

from core.connection import PipelineConnection, PipelineStream, dial
from core.errors import DialError, InvalidURL, MalformedResponse, UnsupportedScheme
from prober.checker import available

from tests.helpers import BAD_400, OK_200


class TestFromURL:
    """URL handling"""

    def test_http_defaults(self):
        conn = PipelineConnection.from_url("http://example.com/path")
        assert conn.host == "example.com"
        assert conn.port == 80
        assert conn.use_ssl is False

    def test_https_defaults(self):
        conn = PipelineConnection.from_url("https://example.com")
        assert conn.port == 443
        assert conn.use_ssl is True

    def test_explicit_port(self):
        conn = PipelineConnection.from_url("https://example.com:8443", timeout=3.0)
        assert conn.port == 8443
        assert conn.timeout == 3.0

    @pytest.mark.parametrize("url", ["ftp://example.com", "example.com", "ws://example.com"])
    def test_unsupported_scheme(self, url):
        with pytest.raises(UnsupportedScheme):
            PipelineConnection.from_url(url)

    @pytest.mark.parametrize("url", ["http://", "http://example.com:notaport"])
    def test_invalid_url(self, url):
        with pytest.raises(InvalidURL):
            PipelineConnection.from_url(url)


class TestDial:

    def test_dial(self, scripted_server):
        server = scripted_server(b"", expect_requests=0)
        sock, host = dial(server.url)
        try:
            assert host == "127.0.0.1"
            assert sock.gettimeout() == 10.0
        finally:
            sock.close()

    def test_context_manager_lifecycle(self, scripted_server):
        server = scripted_server(b"", expect_requests=0)
        conn = PipelineConnection.from_url(server.url, timeout=5.0)
        assert conn.sock is None

        with conn:
            assert conn.sock is not None
            assert conn.sock.gettimeout() == 5.0
        assert conn.sock is None
        assert not hasattr(conn, "connected")

    def test_connect_returns_nothing(self, scripted_server):
        server = scripted_server(b"", expect_requests=0)
        conn = PipelineConnection.from_url(server.url)
        try:
            assert conn.connect() is None
        finally:
            conn.close()

    def test_refused(self, closed_port):
        with pytest.raises(DialError):
            dial(f"http://127.0.0.1:{closed_port}", timeout=2.0)

    def test_stream_wrap_leaves_socket_open(self):
        left, right = socket.socketpair()
        try:
            stream = PipelineStream.wrap(left)
            assert stream.owned
            stream.release()
            left.sendall(b"ping")
            assert right.recv(4) == b"ping"
        finally:
            left.close()
            right.close()

    def test_wrap_rejects_non_stream(self):
        with pytest.raises(TypeError):
            PipelineStream.wrap(42)


class TestAvailable:
    """End to end against a loopback server"""

    def test_pipelining_server(self, scripted_server):
        """Server answers only after both requests arrived"""
        server = scripted_server(OK_200 + BAD_400)

        assert available(server.url, timeout=5.0) is True
        assert server.received == (
            b"OPTIONS * HTTP/1.1\r\nHost: 127.0.0.1\r\n\r\n"
            b"OPTIONS . HTTP/1.1\r\nHost: 127.0.0.1\r\n\r\n"
        )

    def test_closes_after_first_response(self, scripted_server):
        server = scripted_server(OK_200)
        assert available(server.url, timeout=5.0) is False

    def test_wrong_statuses(self, scripted_server):
        server = scripted_server(OK_200 + OK_200)
        assert available(server.url, timeout=5.0) is False

    def test_garbage(self, scripted_server):
        server = scripted_server(b"GARBAGE\r\n\r\n")
        with pytest.raises(MalformedResponse):
            available(server.url, timeout=5.0)

    def test_silent_server_times_out(self, scripted_server):
        """A read timeout aborts the check instead of yielding a verdict"""
        server = scripted_server(OK_200 + BAD_400, expect_requests=3)
        with pytest.raises(MalformedResponse):
            available(server.url, timeout=0.5)

    def test_unsupported_scheme(self):
        with pytest.raises(UnsupportedScheme):
            available("gopher://example.com")


class TestIntegration:
    """Integration tests (require network access)"""

    @pytest.mark.skip(reason="Requires network access")
    def test_public_site(self):
        assert available("http://www.example.com", timeout=5.0) in (True, False)
