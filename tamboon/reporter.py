from __future__ import annotations

import logging
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from tamboon.domain.models import DonationSummary
from tamboon.utils.logging import get_logger

log = get_logger(__name__)


def _money(currency: str, amount: int) -> str:
    return f"{currency.upper()} {amount:,}"


def summary_lines(summary: DonationSummary) -> List[str]:
    """
    Textual donation report, one line per entry.

    Amounts are shown in minor units, exactly as they were charged.
    """
    currency = summary.currency
    lines = [
        f"      total received: {_money(currency, summary.total_requested)}",
        f"successfully donated: {_money(currency, summary.total_charged)}",
        f"     faulty donation: {_money(currency, summary.faulty_amount)}",
        f"  average per person: {_money(currency, summary.average_per_donor)}",
        "          top donors:",
    ]
    lines.extend(f"\t\t{name}" for name in summary.top_donors)
    return lines


def log_summary(summary: DonationSummary, logger: Optional[logging.Logger] = None) -> None:
    """Write the donation report to the log stream."""
    target = logger or log
    for line in summary_lines(summary):
        target.info(line)
    target.info("done!")


def print_summary(summary: DonationSummary, console: Optional[Console] = None) -> None:
    """
    Render the donation summary as a rich table.
    """
    console = console or Console()

    table = Table(
        title="Tamboon Donation Summary",
        box=box.ROUNDED,
        caption=f"{summary.records:,} record(s) in {summary.duration_seconds:.1f}s",
    )
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right", style="magenta")

    table.add_row("Total received", _money(summary.currency, summary.total_requested))
    table.add_row("Successfully donated", _money(summary.currency, summary.total_charged))
    table.add_row("Faulty donation", _money(summary.currency, summary.faulty_amount))
    table.add_row("Average per person", _money(summary.currency, summary.average_per_donor))
    table.add_row("Succeeded / failed", f"{summary.succeeded:,} / {summary.failed:,}")

    if summary.top_donors:
        for rank, name in enumerate(summary.top_donors, start=1):
            table.add_row(f"Top donor #{rank}", name, style="bold green" if rank == 1 else None)
    else:
        table.add_row("Top donors", "[yellow]none[/yellow]")

    console.print(table)


__all__ = ["log_summary", "print_summary", "summary_lines"]
