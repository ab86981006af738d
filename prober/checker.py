"""
HTTP Pipelining Checker

Top level checks against URLs: connect, probe with the default
strategy, close. ``available`` raises when the check cannot be
completed; ``PipeliningChecker`` turns those failures into an ERROR
result so they can be reported next to real verdicts.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List

from config import DEFAULT_TIMEOUT
from core.connection import PipelineConnection
from core.errors import PipeliningError
from prober.engine import supported

logger = logging.getLogger(__name__)


class Support(Enum):
    """Outcome of one check"""
    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"
    ERROR = "error"              # Check could not be completed


@dataclass
class CheckResult:
    """Result of checking one URL"""
    url: str
    status: Support
    details: str = ""
    duration: float = 0.0

    @property
    def available(self) -> bool:
        return self.status == Support.SUPPORTED

    @property
    def failed(self) -> bool:
        return self.status == Support.ERROR

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting"""
        return {
            "url": self.url,
            "status": self.status.value,
            "available": self.available,
            "details": self.details,
            "duration": round(self.duration, 3),
        }


def available(url: str, timeout: float = DEFAULT_TIMEOUT, verify_ssl: bool = True) -> bool:
    """
    Check if HTTP pipelining is available at url.

    Args:
        url: http or https URL
        timeout: Socket timeout in seconds
        verify_ssl: Verify SSL certificates

    Returns:
        Pipelining verdict

    Raises:
        PipeliningError: Connecting or probing failed
    """
    with PipelineConnection.from_url(url, timeout=timeout, verify_ssl=verify_ssl) as conn:
        return supported(conn.sock, conn.host)


class PipeliningChecker:
    """
    Checks URLs for HTTP pipelining support.

    Example:
        checker = PipeliningChecker(timeout=5)
        for result in checker.check_all(["http://example.com"]):
            print(result.url, result.status.value)
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, verify_ssl: bool = True):
        """
        Initialize checker.

        Args:
            timeout: Socket timeout per connection (seconds)
            verify_ssl: Verify SSL certificates
        """
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    def check(self, url: str) -> CheckResult:
        """
        Check a single URL.

        Args:
            url: Target URL

        Returns:
            CheckResult; failures are reported as Support.ERROR
        """
        start = time.time()
        try:
            verdict = available(url, timeout=self.timeout, verify_ssl=self.verify_ssl)
        except PipeliningError as e:
            logger.info("%s: could not determine pipelining support: %s", url, e)
            return CheckResult(
                url=url,
                status=Support.ERROR,
                details=f"Check failed: {e}",
                duration=time.time() - start,
            )

        duration = time.time() - start
        if verdict:
            logger.info("%s supports HTTP pipelining", url)
            return CheckResult(
                url=url,
                status=Support.SUPPORTED,
                details="Both responses arrived in request order",
                duration=duration,
            )

        logger.info("%s does not support HTTP pipelining", url)
        return CheckResult(
            url=url,
            status=Support.UNSUPPORTED,
            details="Unexpected status, wrong order or connection closed early",
            duration=duration,
        )

    def check_all(self, urls: Iterable[str]) -> List[CheckResult]:
        """Check several URLs, one connection each"""
        return [self.check(url) for url in urls]
