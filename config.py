"""
Configuration settings for the HTTP Pipelining Checker
"""

from dataclasses import dataclass, field
from typing import List, Optional
from enum import Enum


class Verbosity(Enum):
    """Output verbosity levels"""
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


@dataclass
class CheckConfig:
    """Main check configuration"""
    # Target URLs
    urls: List[str] = field(default_factory=list)

    # Socket timeout applied to connect, read and write (seconds).
    # Without it a silent server blocks the reader forever.
    timeout: float = 10.0

    # Verify SSL certificates
    verify_ssl: bool = True

    # Output verbosity
    verbosity: Verbosity = Verbosity.NORMAL

    # Report output path
    report_path: Optional[str] = None


# Default ports
DEFAULT_HTTP_PORT = 80
DEFAULT_HTTPS_PORT = 443

SUPPORTED_SCHEMES = {
    "http": DEFAULT_HTTP_PORT,
    "https": DEFAULT_HTTPS_PORT,
}

DEFAULT_TIMEOUT = 10.0

# Response parsing limits (same values as http.client)
MAX_LINE_LENGTH = 65536
MAX_HEADERS = 100

TOOL_VERSION = "1.0.0"
