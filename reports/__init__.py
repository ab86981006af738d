"""
Report generation for pipelining checks
"""

from .generator import ReportGenerator, ReportMetadata

__all__ = [
    "ReportGenerator",
    "ReportMetadata",
]
