from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer

from tamboon.config import get_settings
from tamboon.exceptions import GatewayConfigurationError, InputFileError
from tamboon.gateway.simulated import SimulatedGateway, random_latency
from tamboon.orchestrator import persist_summary, run_donations
from tamboon.reporter import log_summary, print_summary
from tamboon.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Tamboon donation batch processor.")
log = get_logger(__name__)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"gateway={settings.omise_api_url} vault={settings.omise_vault_url} "
        f"keys={'set' if settings.omise_public_key and settings.omise_secret_key else 'missing'} | "
        f"currency={settings.donation_currency} interval={settings.dispatch_interval_ms}ms "
        f"max_workers={settings.dispatch_max_workers} top={settings.top_donors}"
    )


@app.command()
def run(
    path: Path = typer.Argument(..., help="Path to the ROT-128 encrypted donation CSV."),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Charge against the in-process simulated gateway instead of Omise.",
    ),
    interval_ms: Optional[int] = typer.Option(
        None,
        "--interval-ms",
        "-i",
        min=0,
        help="Minimum milliseconds between worker starts (default from settings).",
    ),
    max_workers: Optional[int] = typer.Option(
        None,
        "--max-workers",
        "-w",
        min=1,
        help="Worker thread pool size (default from settings).",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Optional path to write the summary as JSON.",
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON."),
    table: bool = typer.Option(True, "--table/--no-table", help="Print a summary table."),
) -> None:
    """
    Charge every donation in PATH and print the summary report.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=json_logs)

    gateway = SimulatedGateway(latency=random_latency(0.05, 0.3)) if dry_run else None
    interval_seconds = interval_ms / 1000.0 if interval_ms is not None else None

    log.info("performing donations...")
    try:
        summary = run_donations(
            path,
            gateway=gateway,
            interval_seconds=interval_seconds,
            max_workers=max_workers,
            on_report=log_summary,
        )
    except InputFileError as exc:
        typer.echo(f"Error reading the file! {exc}", err=True)
        raise typer.Exit(code=1)
    except GatewayConfigurationError as exc:
        typer.echo(f"Gateway configuration error: {exc}", err=True)
        raise typer.Exit(code=1)

    if table:
        print_summary(summary)
    if output:
        persist_summary(summary, output)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
