"""
Error taxonomy for pipelining checks.

A raised error means the check could not be completed. It is never a
"not supported" verdict; that is always a plain ``False``.
"""

from typing import Optional


class PipeliningError(Exception):
    """Base class for every error raised by the checker"""
    pass


class UnsupportedScheme(PipeliningError):
    """URL scheme is neither http nor https"""

    def __init__(self, scheme: str):
        super().__init__(f"unsupported scheme: {scheme!r}")
        self.scheme = scheme


class InvalidURL(PipeliningError):
    """URL could not be turned into a host and port"""
    pass


class DialError(PipeliningError):
    """TCP connect or TLS handshake failed"""
    pass


class WriteFailure(PipeliningError):
    """The stream rejected a probe request"""

    def __init__(self, request_id: int, message: str):
        super().__init__(f"{message} (id={request_id})")
        self.request_id = request_id


class MalformedResponse(PipeliningError):
    """A response could not be parsed or read"""

    def __init__(self, message: str, request_id: Optional[int] = None):
        if request_id is not None:
            message = f"{message} (id={request_id})"
        super().__init__(message)
        self.request_id = request_id


class ConnectionClosed(PipeliningError):
    """
    The stream ended before a response was complete.

    Strategies turn this into an unexpected response instead of
    letting it escape the probe.
    """
    pass


class TruncatedResponse(ConnectionClosed):
    """The stream ended part way through a response"""
    pass
