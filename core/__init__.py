"""
Core utilities for the HTTP Pipelining Checker
"""

from .connection import PipelineConnection, PipelineStream, dial
from .errors import (
    PipeliningError,
    UnsupportedScheme,
    InvalidURL,
    DialError,
    WriteFailure,
    MalformedResponse,
    TruncatedResponse,
    ConnectionClosed,
)
from .parser import StatusParser, ResponseRecord, parse_status

__all__ = [
    "PipelineConnection",
    "PipelineStream",
    "dial",
    "PipeliningError",
    "UnsupportedScheme",
    "InvalidURL",
    "DialError",
    "WriteFailure",
    "MalformedResponse",
    "TruncatedResponse",
    "ConnectionClosed",
    "StatusParser",
    "ResponseRecord",
    "parse_status",
]
