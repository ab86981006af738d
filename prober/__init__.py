"""
Pipelining probe modules
"""

from .strategy import ProbeStrategy, ProbeRequest, OptionsStrategy, expect_status
from .engine import probe, supported
from .checker import available, PipeliningChecker, CheckResult, Support

__all__ = [
    "ProbeStrategy",
    "ProbeRequest",
    "OptionsStrategy",
    "expect_status",
    "probe",
    "supported",
    "available",
    "PipeliningChecker",
    "CheckResult",
    "Support",
]
