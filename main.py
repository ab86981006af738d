#!/usr/bin/env python3
"""
pipeline-check - HTTP/1.1 Pipelining Checker

Checks whether HTTP servers answer pipelined requests correctly.

Usage:
    python main.py check http://example.com https://example.org
    python main.py check https://example.com --report report.json
    python main.py requests example.com
"""

import logging
import sys
import time
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from config import CheckConfig, Verbosity, DEFAULT_TIMEOUT
from prober.checker import PipeliningChecker, Support
from prober.strategy import OptionsStrategy
from reports.generator import ReportGenerator

console = Console()

LOG_LEVELS = {
    Verbosity.QUIET: logging.ERROR,
    Verbosity.NORMAL: logging.WARNING,
    Verbosity.VERBOSE: logging.INFO,
    Verbosity.DEBUG: logging.DEBUG,
}

STATUS_STYLES = {
    Support.SUPPORTED: "[green]Supported[/green]",
    Support.UNSUPPORTED: "[yellow]Not supported[/yellow]",
    Support.ERROR: "[red]Error[/red]",
}


def setup_logging(verbosity: Verbosity):
    """Route library logging through rich"""
    logging.basicConfig(
        level=LOG_LEVELS[verbosity],
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


@click.group()
def cli():
    """HTTP/1.1 pipelining checker"""


@cli.command()
@click.argument('urls', nargs=-1, required=True)
@click.option('--timeout', default=DEFAULT_TIMEOUT, show_default=True, help='Socket timeout in seconds')
@click.option('--report', '-r', default=None, help='Output report path (.md or .json)')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.option('--debug', is_flag=True, help='Log every request and response')
@click.option('--quiet', '-q', is_flag=True, help='Only print the results table')
@click.option('--no-ssl-verify', is_flag=True, help='Disable SSL certificate verification')
def check(urls: Tuple[str, ...], timeout: float, report: Optional[str], verbose: bool,
          debug: bool, quiet: bool, no_ssl_verify: bool):
    """Check URLS for HTTP pipelining support"""

    verbosity = Verbosity.NORMAL
    if quiet:
        verbosity = Verbosity.QUIET
    if verbose:
        verbosity = Verbosity.VERBOSE
    if debug:
        verbosity = Verbosity.DEBUG

    config = CheckConfig(
        urls=list(urls),
        timeout=timeout,
        verify_ssl=not no_ssl_verify,
        verbosity=verbosity,
        report_path=report,
    )
    setup_logging(config.verbosity)

    if config.verbosity != Verbosity.QUIET:
        console.print(f"\n[bold cyan]Targets:[/bold cyan] {len(config.urls)}")
        console.print(f"[bold cyan]Timeout:[/bold cyan] {config.timeout}s\n")

    checker = PipeliningChecker(timeout=config.timeout, verify_ssl=config.verify_ssl)
    results = []
    start_time = time.time()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        disable=config.verbosity == Verbosity.QUIET,
    ) as progress:
        for url in config.urls:
            task = progress.add_task(f"Checking {url}...", total=None)
            result = checker.check(url)
            results.append(result)
            progress.update(task, description=f"{url}: {STATUS_STYLES[result.status]}")

    scan_duration = time.time() - start_time

    results_table = Table(title="Pipelining Results")
    results_table.add_column("URL", style="cyan")
    results_table.add_column("Status")
    results_table.add_column("Details")
    results_table.add_column("Time", justify="right")

    for result in results:
        results_table.add_row(
            result.url,
            STATUS_STYLES[result.status],
            result.details,
            f"{result.duration:.2f}s",
        )

    console.print(results_table)

    errors = sum(1 for r in results if r.failed)
    if config.verbosity != Verbosity.QUIET:
        supported_count = sum(1 for r in results if r.available)
        console.print(Panel(
            f"[bold]{supported_count}/{len(results)} support HTTP pipelining[/bold]"
            + (f"\n[red]{errors} could not be checked[/red]" if errors else "")
            + f"\n\nChecked in {scan_duration:.2f}s",
            title="Summary",
            border_style="red" if errors else "green",
        ))

    if config.report_path:
        report_gen = ReportGenerator()
        report_gen.set_metadata(targets=config.urls, scan_duration=scan_duration)
        report_gen.add_results(results)

        if Path(config.report_path).suffix == '.md':
            report_gen.generate_markdown(config.report_path)
        else:
            report_gen.generate_json(config.report_path)

        console.print(f"[green]Report saved to: {config.report_path}[/green]")

    if errors:
        sys.exit(1)


@cli.command()
@click.argument('host')
def requests(host: str):
    """Show the requests pipelined to HOST"""

    strategy = OptionsStrategy(host)
    for request_id, request in enumerate(strategy.REQUESTS):
        console.print(Panel(
            strategy.render(request_id).decode("utf-8").replace("\r\n", "\\r\\n\n"),
            title=f"[bold]#{request_id}: {request.description}[/bold]",
            subtitle=f"expect {request.expected_status}",
            border_style="cyan",
        ))


if __name__ == "__main__":
    cli()
