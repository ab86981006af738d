"""
Raw Socket Connections

Opens the single TCP (or TLS) connection a pipelining probe runs on,
and provides the buffered reader/writer view the probe engine uses.

Key Features:
- No HTTP library abstractions: probes write raw request bytes
- http and https URLs, default ports 80/443
- TLS restricted to HTTP/1.1 via ALPN
- Socket timeout as the probe deadline
"""

import logging
import socket
import ssl
from typing import BinaryIO, Optional, Tuple, Union
from urllib.parse import urlparse

from config import DEFAULT_TIMEOUT, SUPPORTED_SCHEMES
from core.errors import DialError, InvalidURL, UnsupportedScheme

logger = logging.getLogger(__name__)


class PipelineStream:
    """
    Buffered duplex view used by one probe.

    Wraps either a connected socket (buffers are created with
    ``makefile`` and released afterwards, the socket itself stays open)
    or a caller supplied ``(reader, writer)`` pair, which is used as is
    and never closed.
    """

    def __init__(self, reader: BinaryIO, writer: BinaryIO, owned: bool = False):
        self.reader = reader
        self.writer = writer
        self.owned = owned

    @classmethod
    def wrap(cls, stream: Union["PipelineStream", socket.socket, Tuple[BinaryIO, BinaryIO]]) -> "PipelineStream":
        """
        Build a PipelineStream for a socket or a (reader, writer) pair.

        Args:
            stream: Connected socket, (reader, writer) tuple, or PipelineStream

        Returns:
            PipelineStream over the same underlying channel
        """
        if isinstance(stream, PipelineStream):
            return stream
        if isinstance(stream, tuple):
            reader, writer = stream
            return cls(reader, writer)
        if hasattr(stream, "makefile"):
            return cls(stream.makefile("rb"), stream.makefile("wb"), owned=True)
        raise TypeError(f"not a stream: {type(stream).__name__}")

    def release(self):
        """Close buffers created by wrap(); the socket is left open"""
        if not self.owned:
            return
        for buf in (self.writer, self.reader):
            try:
                buf.close()
            except OSError as e:
                # Unflushed bytes of a failed write cannot be sent either
                logger.debug("discarding stream buffer: %s", e)


class PipelineConnection:
    """
    TCP/TLS connection to the server under test.

    The connection is owned by the caller: the probe engine uses it
    but never closes it.

    Example:
        with PipelineConnection.from_url("https://example.com") as conn:
            verdict = supported(conn.sock, conn.host)
    """

    def __init__(
        self,
        host: str,
        port: Optional[int] = None,
        use_ssl: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True
    ):
        """
        Initialize the connection.

        Args:
            host: Target hostname or IP
            port: Target port (default: 80 for HTTP, 443 for HTTPS)
            use_ssl: Whether to use TLS/SSL
            timeout: Socket timeout in seconds, for connect and every read/write
            verify_ssl: Whether to verify SSL certificates
        """
        self.host = host
        self.port = port or SUPPORTED_SCHEMES["https" if use_ssl else "http"]
        self.use_ssl = use_ssl
        self.timeout = timeout
        self.verify_ssl = verify_ssl

        self.sock: Optional[socket.socket] = None

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "PipelineConnection":
        """
        Create a connection from a URL string.

        Args:
            url: Full URL (e.g., https://example.com:8443)
            **kwargs: Additional arguments passed to __init__

        Returns:
            Configured, not yet connected PipelineConnection

        Raises:
            UnsupportedScheme: Scheme is not http or https
            InvalidURL: URL has no host or an invalid port
        """
        parsed = urlparse(url)
        scheme = parsed.scheme.lower()
        if scheme not in SUPPORTED_SCHEMES:
            raise UnsupportedScheme(parsed.scheme)
        if not parsed.hostname:
            raise InvalidURL(f"no host in URL: {url!r}")
        try:
            port = parsed.port
        except ValueError as e:
            raise InvalidURL(f"invalid port in URL {url!r}: {e}") from e

        return cls(
            host=parsed.hostname,
            port=port or SUPPORTED_SCHEMES[scheme],
            use_ssl=scheme == "https",
            **kwargs
        )

    def connect(self):
        """
        Establish connection to the target.

        Raises:
            DialError: If connection or TLS handshake fails
        """
        try:
            sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        except socket.timeout as e:
            raise DialError(f"Connection timed out to {self.host}:{self.port}") from e
        except OSError as e:
            raise DialError(f"Socket error connecting to {self.host}:{self.port}: {e}") from e

        if self.use_ssl:
            context = ssl.create_default_context()
            if not self.verify_ssl:
                context.check_hostname = False
                context.verify_mode = ssl.CERT_NONE
            # Keep servers from negotiating HTTP/2
            context.set_alpn_protocols(["http/1.1"])

            try:
                sock = context.wrap_socket(sock, server_hostname=self.host)
            except ssl.SSLError as e:
                sock.close()
                raise DialError(f"SSL error: {e}") from e
            except OSError as e:
                sock.close()
                raise DialError(f"Socket error during TLS handshake: {e}") from e

        self.sock = sock
        logger.debug("connected to %s:%d (tls=%s)", self.host, self.port, self.use_ssl)

    def close(self):
        """Close the connection"""
        if self.sock:
            try:
                self.sock.close()
            except OSError as e:
                logger.debug("error closing connection to %s: %s", self.host, e)
            self.sock = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def dial(url: str, timeout: float = DEFAULT_TIMEOUT, verify_ssl: bool = True) -> Tuple[socket.socket, str]:
    """
    Connect to the server named by url.

    Args:
        url: http or https URL
        timeout: Socket timeout in seconds
        verify_ssl: Verify SSL certificates

    Returns:
        Tuple of (connected socket, bare hostname for the Host header).
        The caller closes the socket.
    """
    conn = PipelineConnection.from_url(url, timeout=timeout, verify_ssl=verify_ssl)
    conn.connect()
    return conn.sock, conn.host
