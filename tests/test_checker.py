"""
Tests for the checker, reports and CLI
"""

import json

import pytest
from click.testing import CliRunner

from main import cli
from prober.checker import CheckResult, PipeliningChecker, Support
from reports.generator import ReportGenerator

from tests.helpers import BAD_400, OK_200


class TestPipeliningChecker:

    @pytest.fixture
    def checker(self):
        return PipeliningChecker(timeout=5.0)

    def test_supported(self, checker, scripted_server):
        server = scripted_server(OK_200 + BAD_400)
        result = checker.check(server.url)

        assert result.status == Support.SUPPORTED
        assert result.available
        assert not result.failed

    def test_unsupported(self, checker, scripted_server):
        server = scripted_server(OK_200)
        result = checker.check(server.url)

        assert result.status == Support.UNSUPPORTED
        assert not result.available

    def test_error_is_not_a_verdict(self, checker):
        result = checker.check("ftp://example.com")

        assert result.status == Support.ERROR
        assert result.failed
        assert "unsupported scheme" in result.details

    def test_check_all(self, checker, scripted_server):
        server = scripted_server(OK_200 + BAD_400)
        results = checker.check_all([server.url, "ftp://example.com"])

        assert [r.status for r in results] == [Support.SUPPORTED, Support.ERROR]

    def test_to_dict(self):
        result = CheckResult("http://a", Support.UNSUPPORTED, "closed", 0.12345)
        assert result.to_dict() == {
            "url": "http://a",
            "status": "unsupported",
            "available": False,
            "details": "closed",
            "duration": 0.123,
        }


class TestReportGenerator:

    @pytest.fixture
    def generator(self):
        gen = ReportGenerator()
        gen.set_metadata(targets=["http://a", "http://b"], scan_duration=1.5)
        gen.add_results([
            CheckResult("http://a", Support.SUPPORTED, "ok"),
            CheckResult("http://b", Support.ERROR, "Check failed: a|b"),
        ])
        return gen

    def test_json(self, generator, tmp_path):
        path = generator.generate_json(str(tmp_path / "report.json"))
        data = json.loads((tmp_path / "report.json").read_text())

        assert path.endswith("report.json")
        assert data["metadata"]["targets"] == ["http://a", "http://b"]
        assert data["summary"] == {"total_checks": 2, "supported": 1, "unsupported": 0, "errors": 1}
        assert data["results"][1]["status"] == "error"

    def test_markdown(self, generator):
        md = generator.build_markdown()

        assert md.startswith("# HTTP Pipelining Report")
        assert "| http://a | ✅ Supported |" in md
        assert "a\\|b" in md


class TestCLI:

    def test_check_supported(self, scripted_server):
        server = scripted_server(OK_200 + BAD_400)
        result = CliRunner().invoke(cli, ["check", server.url, "--timeout", "5"])

        assert result.exit_code == 0, result.output
        assert "Supported" in result.output

    def test_check_error_exit_code(self):
        result = CliRunner().invoke(cli, ["check", "--quiet", "ftp://example.com"])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_report(self, scripted_server, tmp_path):
        server = scripted_server(OK_200)
        report = tmp_path / "out.json"
        result = CliRunner().invoke(cli, ["check", server.url, "--timeout", "5", "--report", str(report)])

        assert result.exit_code == 0, result.output
        data = json.loads(report.read_text())
        assert data["results"][0]["status"] == "unsupported"

    def test_requests(self):
        result = CliRunner().invoke(cli, ["requests", "example.com"])

        assert result.exit_code == 0
        assert "OPTIONS * HTTP/1.1" in result.output
        assert "OPTIONS . HTTP/1.1" in result.output
