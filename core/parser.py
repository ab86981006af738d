"""
HTTP Response Status Parser

Reads one HTTP/1.1 response at a time from a buffered byte stream.
Only the status code and Content-Length are interpreted; the body is
discarded so the stream is left at the start of the next response.
"""

import logging
import re
from dataclasses import dataclass
from typing import BinaryIO, Optional

from config import MAX_HEADERS, MAX_LINE_LENGTH
from core.errors import ConnectionClosed, MalformedResponse, TruncatedResponse

logger = logging.getLogger(__name__)

# Largest single read while discarding a body
DISCARD_CHUNK_SIZE = 65536


@dataclass
class ResponseRecord:
    """Status of one parsed response"""
    status_code: int
    content_length: int = 0
    # Bytes taken from the stream: status line + headers + body
    consumed: int = 0


class StatusParser:
    """
    Parser for back-to-back HTTP/1.1 responses on one stream.

    Every response is consumed exactly: status line, header lines up to
    the blank line, then Content-Length bytes of body. Anything less or
    more desynchronizes all later responses, so lengths are never guessed.
    Chunked bodies and close-delimited bodies are not supported; a
    response without Content-Length has an empty body.

    Example:
        parser = StatusParser()
        reader = sock.makefile("rb")
        first = parser.parse(reader)
        second = parser.parse(reader)
        print(first.status_code, second.status_code)
    """

    # "HTTP/1.1 <code>" followed by the reason phrase or the line end
    STATUS_LINE_PATTERN = re.compile(rb'HTTP/1\.1 (\d+)(?: |\r?\n\Z)')

    CONTENT_LENGTH = b"content-length"

    def __init__(self, max_line_length: int = MAX_LINE_LENGTH, max_headers: int = MAX_HEADERS):
        """
        Initialize parser.

        Args:
            max_line_length: Longest accepted status or header line (bytes)
            max_headers: Most header lines accepted in one response
        """
        self.max_line_length = max_line_length
        self.max_headers = max_headers

    def parse(self, reader: BinaryIO) -> ResponseRecord:
        """
        Parse one response and skip its body.

        Args:
            reader: Buffered binary stream positioned at a response start

        Returns:
            ResponseRecord for the response

        Raises:
            ConnectionClosed: Stream ended before the response started
            TruncatedResponse: Stream ended inside the response (a
                ConnectionClosed)
            MalformedResponse: Unparsable status line or Content-Length,
                over-long line or header block, or a read error
        """
        line = self._read_line(reader, "status line")
        if not line:
            raise ConnectionClosed("connection closed before response")
        self._require_terminated(line, "status line")

        match = self.STATUS_LINE_PATTERN.match(line)
        if not match:
            raise MalformedResponse(f"malformed status line: {line[:64]!r}")
        record = ResponseRecord(status_code=int(match.group(1)), consumed=len(line))

        content_length: Optional[int] = None
        for _ in range(self.max_headers + 1):
            line = self._read_line(reader, "header")
            self._require_terminated(line, "headers")
            record.consumed += len(line)

            if line == b"\r\n" or line == b"\n":
                break
            # Only the first Content-Length counts
            if content_length is None:
                content_length = self._content_length(line)
        else:
            raise MalformedResponse(f"more than {self.max_headers} header lines")

        record.content_length = content_length or 0
        self._discard(reader, record.content_length)
        record.consumed += record.content_length

        logger.debug(
            "parsed response status=%d content_length=%d consumed=%d",
            record.status_code, record.content_length, record.consumed,
        )
        return record

    def _read_line(self, reader: BinaryIO, where: str) -> bytes:
        """Read one line, bounded by max_line_length"""
        try:
            line = reader.readline(self.max_line_length + 1)
        except OSError as e:
            raise MalformedResponse(f"read failed in {where}: {e}") from e
        if len(line) > self.max_line_length:
            raise MalformedResponse(f"{where} line longer than {self.max_line_length} bytes")
        return line

    @staticmethod
    def _require_terminated(line: bytes, where: str):
        # readline only stops short of a newline at end of stream
        if not line.endswith(b"\n"):
            raise TruncatedResponse(f"connection closed in {where}")

    def _content_length(self, line: bytes) -> Optional[int]:
        """Return the Content-Length value if line is that header"""
        name, sep, value = line.partition(b":")
        if not sep or name.lower() != self.CONTENT_LENGTH:
            return None

        value = value.strip()
        if not value.isdigit():
            raise MalformedResponse(f"invalid Content-Length: {value[:32]!r}")
        return int(value)

    @staticmethod
    def _discard(reader: BinaryIO, length: int):
        """Skip exactly length body bytes"""
        remaining = length
        while remaining:
            try:
                chunk = reader.read(min(remaining, DISCARD_CHUNK_SIZE))
            except OSError as e:
                raise MalformedResponse(f"read failed in body: {e}") from e
            if not chunk:
                raise TruncatedResponse(
                    f"connection closed in body ({length - remaining} of {length} bytes)"
                )
            remaining -= len(chunk)


def parse_status(reader: BinaryIO) -> int:
    """
    Parse one response from reader and return its status code.

    Args:
        reader: Buffered binary stream positioned at a response start

    Returns:
        The numeric status code
    """
    return StatusParser().parse(reader).status_code
