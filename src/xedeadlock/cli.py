"""
Command-line interface for xedeadlock.

Provides commands for analyzing deadlock reports from extended-event trace
files and for managing the default trace file pattern.
"""

import io
import logging

from datetime import datetime
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path

import click

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError

from xedeadlock.analysis.service import DeadlockAnalysisService
from xedeadlock.analysis.types import AnalysisConfig
from xedeadlock.config import (
    get_config_path,
    get_trace_pattern,
    set_trace_pattern,
    unset_trace_pattern,
)
from xedeadlock.constants import REPORT_LEGEND, TABLE_QUERY_WIDTH
from xedeadlock.logging_config import setup_logging
from xedeadlock.models.report import DeadlockReport
from xedeadlock.parsers.base import SourceReadError, TraceSource
from xedeadlock.parsers.server import ServerTraceSource
from xedeadlock.parsers.xml_file import XmlTraceFileSource
from xedeadlock.providers import (
    ChainedPathProvider,
    ConfigPathProvider,
    ConfigurationError,
    ExplicitPathProvider,
    ServerLogPathProvider,
    TracePathProvider,
)
from xedeadlock.report.export import export_report_csv, export_report_json
from xedeadlock.report.formatting import format_report

logger = logging.getLogger(__name__)

try:
    __version__ = get_version("xedeadlock")
except PackageNotFoundError:
    __version__ = "dev"

DATETIME_FORMATS = [
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S.%f",
]


def _connect(url: str) -> Engine:
    """Create an engine for --server, reporting bad URLs as CLI errors."""
    try:
        return create_engine(url)
    except ArgumentError as e:
        raise click.ClickException(f"Invalid server URL: {e}") from e


def build_pipeline(
    pattern: str | None, engine: Engine | None
) -> tuple[TraceSource, TracePathProvider]:
    """
    Choose the trace source and pattern providers for a run.

    Pattern precedence: explicit argument, then config file, then (with a
    server connection) the server's error log directory.

    Args:
        pattern: Pattern given on the command line
        engine: Server connection, or None to read files locally

    Returns:
        Tuple of (trace source, pattern provider)
    """
    providers: list[TracePathProvider] = [
        ExplicitPathProvider(pattern),
        ConfigPathProvider(),
    ]

    if engine is None:
        return XmlTraceFileSource(), ChainedPathProvider(*providers)

    providers.append(ServerLogPathProvider(engine))
    return ServerTraceSource(engine), ChainedPathProvider(*providers)


def render_report(
    report: DeadlockReport, output_format: str, include_legend: bool, full_query: bool
) -> str:
    """Render a report in the requested output format."""
    if output_format == "table":
        query_width = None if full_query else TABLE_QUERY_WIDTH
        return (
            format_report(
                report, include_legend=include_legend, query_width=query_width
            )
            + "\n"
        )

    buffer = io.StringIO()
    if output_format == "json":
        export_report_json(report, buffer)
    else:
        export_report_csv(report, buffer)
    return buffer.getvalue()


@click.group()
@click.version_option(__version__, prog_name="xedeadlock")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool) -> None:
    """xedeadlock: SQL Server deadlock report analysis"""
    setup_logging(verbose=verbose, console_format="%(levelname)s: %(message)s")


@cli.command()
@click.argument("pattern", required=False)
@click.option(
    "--start",
    "start_time",
    type=click.DateTime(formats=DATETIME_FORMATS),
    help="Only deadlocks at or after this time (UTC)",
)
@click.option(
    "--end",
    "end_time",
    type=click.DateTime(formats=DATETIME_FORMATS),
    help="Only deadlocks at or before this time (UTC)",
)
@click.option(
    "--server",
    metavar="URL",
    help="SQLAlchemy URL; read .xel files through this SQL Server instance",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "csv"]),
    default="table",
    show_default=True,
    help="Output format",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write output to a file instead of stdout",
)
@click.option("--no-legend", is_flag=True, help="Omit the column legend")
@click.option("--full-query", is_flag=True, help="Do not truncate query text")
def analyze(
    pattern: str | None,
    start_time: datetime | None,
    end_time: datetime | None,
    server: str | None,
    output_format: str,
    output: Path | None,
    no_legend: bool,
    full_query: bool,
) -> None:
    """Correlate blocker and victim sessions from deadlock reports.

    PATTERN is a glob of trace files, e.g. 'logs/system_health*.xml'.
    Without it, the configured pattern is used, or with --server the
    server's own log directory.
    """
    engine = _connect(server) if server else None

    try:
        source, provider = build_pipeline(pattern, engine)
        service = DeadlockAnalysisService(source, provider)
        analysis_config = AnalysisConfig(start_time=start_time, end_time=end_time)
        report = service.analyze(analysis_config)
    except (SourceReadError, ConfigurationError) as e:
        raise click.ClickException(str(e)) from e
    finally:
        if engine is not None:
            engine.dispose()

    rendered = render_report(
        report, output_format, include_legend=not no_legend, full_query=full_query
    )

    if output is not None:
        with open(output, "w", newline="", encoding="utf-8") as f:
            f.write(rendered)
        click.echo(f"✓ Wrote {len(report.pairs)} pair(s) to {output}", err=True)
    else:
        click.echo(rendered, nl=False)

    if report.events_skipped:
        click.echo(
            f"⚠ Skipped {report.events_skipped} malformed deadlock report(s)",
            err=True,
        )


@cli.command()
def legend() -> None:
    """Explain the report columns."""
    for line in REPORT_LEGEND:
        click.echo(line)


@cli.group()
def config() -> None:
    """Manage xedeadlock configuration."""
    pass


@config.command("show")
def config_show() -> None:
    """Show the configuration file and trace file pattern."""
    click.echo(f"Config file: {get_config_path()}")
    pattern = get_trace_pattern()
    click.echo(f"Trace file pattern: {pattern if pattern else '(not set)'}")


@config.command("set-trace-pattern")
@click.argument("pattern")
def config_set_trace_pattern(pattern: str) -> None:
    """Set the default trace file pattern."""
    try:
        set_trace_pattern(pattern)
    except PermissionError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"✓ Trace file pattern set to: {pattern}")


@config.command("unset-trace-pattern")
def config_unset_trace_pattern() -> None:
    """Remove the default trace file pattern."""
    if get_trace_pattern() is None:
        click.echo("No trace file pattern is set")
        return
    unset_trace_pattern()
    click.echo("✓ Trace file pattern removed")


if __name__ == "__main__":
    cli()
