"""
Probe Strategies

A strategy decides how many requests a probe pipelines, what bytes each
request is, and which status a correctly pipelining server answers each
one with. The engine only relies on the ProbeStrategy protocol, so any
object with the three methods can be probed with.
"""

import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional, Protocol, Tuple, runtime_checkable

from core.errors import ConnectionClosed, MalformedResponse, WriteFailure
from core.parser import StatusParser

logger = logging.getLogger(__name__)


@runtime_checkable
class ProbeStrategy(Protocol):
    """Policy driving one pipelining probe"""

    def request_count(self) -> int:
        """Number of requests pipelined per probe"""
        ...

    def write_request(self, request_id: int, sink: BinaryIO) -> None:
        """
        Write request request_id to sink.

        Must be deterministic for a given id and must not read.
        Raises WriteFailure on I/O error.
        """
        ...

    def read_response(self, request_id: int, source: BinaryIO) -> bool:
        """
        Consume exactly one response from source.

        Returns whether it is the response a pipelining server sends
        for request_id; False when the server closed the connection
        before it. Raises MalformedResponse on any other failure.
        """
        ...


@dataclass(frozen=True)
class ProbeRequest:
    """One pipelined request and the status it should get"""
    method: str
    target: str
    expected_status: int
    description: str = ""

    def render(self, host: str) -> bytes:
        """Raw request bytes with the Host header for host"""
        return f"{self.method} {self.target} HTTP/1.1\r\nHost: {host}\r\n\r\n".encode("utf-8")


# A well formed request followed by one with a request target that is
# neither "*" nor an origin/absolute form. A server that pipelines
# answers 200 then 400, in that order, on the same connection.
OPTIONS_REQUESTS: Tuple[ProbeRequest, ...] = (
    ProbeRequest("OPTIONS", "*", 200, "asterisk-form OPTIONS"),
    ProbeRequest("OPTIONS", ".", 400, "invalid request target"),
)


def expect_status(
    source: BinaryIO,
    request_id: int,
    expected_status: int,
    parser: Optional[StatusParser] = None
) -> bool:
    """
    Read one response and compare its status.

    Args:
        source: Buffered reader positioned at the response
        request_id: Id of the request being answered (for errors and logs)
        expected_status: Status a pipelining server returns
        parser: Parser to use (default: a new StatusParser)

    Returns:
        True if the status matches, False if it differs or the
        connection was closed before the response was complete

    Raises:
        MalformedResponse: Unparsable response or read error
    """
    parser = parser or StatusParser()
    try:
        record = parser.parse(source)
    except ConnectionClosed as e:
        logger.debug("no complete response id=%d: %s", request_id, e)
        return False
    except MalformedResponse as e:
        raise type(e)(f"malformed response: {e}", request_id) from e

    expected = record.status_code == expected_status
    logger.debug(
        "response id=%d status=%d expected=%d match=%s",
        request_id, record.status_code, expected_status, expected,
    )
    return expected


class OptionsStrategy:
    """
    Default two request strategy.

    Example:
        strategy = OptionsStrategy("example.com")
        verdict = probe(sock, strategy)
    """

    REQUESTS = OPTIONS_REQUESTS

    def __init__(self, host: str, parser: Optional[StatusParser] = None):
        """
        Args:
            host: Value for the Host header
            parser: Response parser (default: StatusParser())
        """
        if not host:
            raise ValueError("host is empty")
        self.host = host
        self.parser = parser or StatusParser()

    def request_count(self) -> int:
        return len(self.REQUESTS)

    def _request(self, request_id: int) -> ProbeRequest:
        if not 0 <= request_id < len(self.REQUESTS):
            raise ValueError(f"invalid id: {request_id}")
        return self.REQUESTS[request_id]

    def render(self, request_id: int) -> bytes:
        """Raw bytes of request request_id"""
        return self._request(request_id).render(self.host)

    def write_request(self, request_id: int, sink: BinaryIO) -> None:
        data = self.render(request_id)
        try:
            sink.write(data)
        except OSError as e:
            raise WriteFailure(request_id, f"write failed: {e}") from e
        logger.debug("wrote request id=%d (%d bytes)", request_id, len(data))

    def read_response(self, request_id: int, source: BinaryIO) -> bool:
        request = self._request(request_id)
        return expect_status(source, request_id, request.expected_status, self.parser)
