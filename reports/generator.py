"""
Pipelining Report Generator

Generates Markdown and JSON reports for pipelining checks.
"""

import json
from typing import List, Optional
from dataclasses import dataclass
from datetime import datetime

from config import TOOL_VERSION
from prober.checker import CheckResult, Support


@dataclass
class ReportMetadata:
    """Metadata for the report"""
    targets: List[str]
    scan_date: str
    scan_duration: float
    tool_version: str = TOOL_VERSION


class ReportGenerator:
    """
    Generates pipelining reports in various formats.

    Supports:
    - Markdown reports
    - JSON reports (machine-readable)

    Example:
        gen = ReportGenerator()
        gen.set_metadata(targets=urls, scan_duration=1.5)
        gen.add_results(results)
        gen.generate_json("report.json")
    """

    STATUS_LABELS = {
        Support.SUPPORTED: "✅ Supported",
        Support.UNSUPPORTED: "❌ Not supported",
        Support.ERROR: "⚠️ Could not determine",
    }

    def __init__(self):
        self.metadata: Optional[ReportMetadata] = None
        self.results: List[CheckResult] = []

    def set_metadata(self, targets: List[str], scan_duration: float):
        """Set report metadata"""
        self.metadata = ReportMetadata(
            targets=list(targets),
            scan_date=datetime.now().isoformat(),
            scan_duration=scan_duration
        )

    def add_results(self, results: List[CheckResult]):
        """Add check results to report"""
        self.results.extend(results)

    def _count(self, status: Support) -> int:
        return sum(1 for r in self.results if r.status == status)

    def generate_markdown(self, output_path: str) -> str:
        """
        Generate Markdown report.

        Args:
            output_path: Path to save Markdown file

        Returns:
            Path to generated report
        """
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(self.build_markdown())

        return output_path

    def build_markdown(self) -> str:
        """Build Markdown report content"""
        md = '# HTTP Pipelining Report\n\n'

        if self.metadata:
            md += f'**Date:** {self.metadata.scan_date}  \n'
            md += f'**Duration:** {self.metadata.scan_duration:.2f}s  \n'
            md += f'**Tool Version:** {self.metadata.tool_version}\n\n'

        md += '## Summary\n\n'
        md += '| Outcome | Count |\n|---|---|\n'
        for status in Support:
            md += f'| {self.STATUS_LABELS[status]} | {self._count(status)} |\n'
        md += '\n## Results\n\n'
        md += '| URL | Outcome | Details | Time |\n|---|---|---|---|\n'

        for result in self.results:
            details = result.details.replace('|', '\\|')
            md += (
                f'| {result.url} | {self.STATUS_LABELS[result.status]} '
                f'| {details} | {result.duration:.2f}s |\n'
            )

        md += '''
## References

- [RFC 9112 §9.3.2 - Pipelining](https://www.rfc-editor.org/rfc/rfc9112#section-9.3.2)
'''
        return md

    def generate_json(self, output_path: str) -> str:
        """
        Generate JSON report.

        Args:
            output_path: Path to save JSON file

        Returns:
            Path to generated report
        """
        data = {
            "metadata": {
                "targets": self.metadata.targets if self.metadata else [],
                "scan_date": self.metadata.scan_date if self.metadata else None,
                "scan_duration": self.metadata.scan_duration if self.metadata else None,
                "tool_version": self.metadata.tool_version if self.metadata else TOOL_VERSION,
            },
            "results": [r.to_dict() for r in self.results],
            "summary": {
                "total_checks": len(self.results),
                "supported": self._count(Support.SUPPORTED),
                "unsupported": self._count(Support.UNSUPPORTED),
                "errors": self._count(Support.ERROR),
            }
        }

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

        return output_path
