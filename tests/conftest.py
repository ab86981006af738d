"""
Shared fixtures: a loopback server and a closed port
"""

import socket
import threading

import pytest


class ScriptedServer:
    """
    Loopback server for one connection.

    Reads until it has seen expect_requests complete requests, only
    then sends the canned response bytes and closes. A client that
    waits for a response before writing its next request stalls.
    """

    def __init__(self, response: bytes, expect_requests: int = 2):
        self.response = response
        self.expect_requests = expect_requests
        self.received = b""

        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(1)
        self._sock.settimeout(5)
        self.port = self._sock.getsockname()[1]

        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    @property
    def url(self) -> str:
        return f"http://127.0.0.1:{self.port}"

    def _serve(self):
        try:
            conn, _ = self._sock.accept()
        except OSError:
            return
        with conn:
            conn.settimeout(5)
            try:
                while self.received.count(b"\r\n\r\n") < self.expect_requests:
                    chunk = conn.recv(4096)
                    if not chunk:
                        return
                    self.received += chunk
                conn.sendall(self.response)
            except OSError:
                return

    def close(self):
        self._sock.close()
        self._thread.join(timeout=5)


@pytest.fixture
def scripted_server():
    """Factory fixture: scripted_server(response_bytes, expect_requests=2)"""
    servers = []

    def start(response: bytes, expect_requests: int = 2) -> ScriptedServer:
        server = ScriptedServer(response, expect_requests)
        servers.append(server)
        return server

    yield start

    for server in servers:
        server.close()


@pytest.fixture
def closed_port():
    """A local port with nothing listening on it"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
