"""agentboard command line - serve the API and inspect completion reports."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

import click

from agentboard import __version__
from agentboard.config import ConfigError, Settings
from agentboard.logging import setup_logging
from agentboard.verdict import VerdictOutcome, parse_verdict


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """agentboard - orchestrate implementation and QA agent runs on a ticket board."""
    pass


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--port", default=8000, type=int, show_default=True, help="Port to bind")
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for log files (default: AGENTBOARD_LOG_DIR or ./logs)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def serve(host: str, port: int, log_dir: Path | None, verbose: bool) -> None:
    """Run the REST API with uvicorn."""
    import uvicorn  # noqa: PLC0415

    from agentboard.api import create_app  # noqa: PLC0415

    setup_logging(log_dir=log_dir, level="DEBUG" if verbose else None)
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    if not settings.runtime_api_key:
        click.echo("Warning: no agent runtime API key configured; runs will fail", err=True)
    uvicorn.run(create_app(settings), host=host, port=port, log_level="info")


@main.command()
@click.argument("report", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--ticket", "ticket_id", default=None, help="Expected ticket ID")
def verdict(report: TextIO, ticket_id: str | None) -> None:
    """Print the verdict of a completion report (file or stdin).

    Exits 0 for pass, 1 for fail and 2 when no verdict applies.
    """
    result = parse_verdict(report.read())
    if result.outcome is VerdictOutcome.UNKNOWN:
        click.echo("unknown")
        sys.exit(2)
    if ticket_id is not None and not result.applies_to(ticket_id):
        click.echo(f"unknown (verdict is for ticket {result.ticket_id})")
        sys.exit(2)

    click.echo(f"{result.outcome.value} {result.ticket_id}")
    sys.exit(0 if result.outcome is VerdictOutcome.PASS else 1)


if __name__ == "__main__":
    main()
