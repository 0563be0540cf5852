"""
Orchestrator for a donation run: wires the record source, dispatcher,
workers, aggregator and completion barrier, then builds the summary.

Usage (example from CLI):
    from tamboon.orchestrator import run_donations

    summary = run_donations("data/fng.1000.csv.rot128")
    print(summary.total_charged)

The summary can optionally be persisted as JSON via `persist_summary`.
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Callable, List, Optional

from tamboon.config import get_settings
from tamboon.domain.models import AggregateState, DonationSummary
from tamboon.gateway.abstract import PaymentGateway
from tamboon.gateway.omise import OmiseGateway
from tamboon.pipeline.aggregator import Aggregator, top_donors
from tamboon.pipeline.dispatcher import Dispatcher, IntervalGate
from tamboon.pipeline.source import RecordSource
from tamboon.pipeline.synchronizer import CompletionBarrier
from tamboon.pipeline.worker import DonationWorker
from tamboon.utils.logging import get_logger
from tamboon.utils.profiler import profile_block

log = get_logger(__name__)

SummaryCallback = Callable[[DonationSummary], None]


def build_summary(
    state: AggregateState,
    currency: str,
    top_count: int = 3,
    duration_seconds: float = 0.0,
) -> DonationSummary:
    """
    Turn the final aggregate state into a report.

    The average divides the charged total by the number of records actually
    processed; a run with no records reports an average of zero.
    """
    average = state.total_charged // state.processed if state.processed else 0
    return DonationSummary(
        currency=currency,
        total_requested=state.total_requested,
        total_charged=state.total_charged,
        faulty_amount=state.faulty_amount,
        average_per_donor=average,
        records=state.processed,
        succeeded=state.succeeded,
        failed=state.failed,
        top_donors=top_donors(state.ranking, top_count),
        duration_seconds=round(duration_seconds, 3),
    )


def process_source(
    source: RecordSource,
    gateway: PaymentGateway,
    interval_seconds: Optional[float] = None,
    max_workers: Optional[int] = None,
    currency: Optional[str] = None,
    top_count: Optional[int] = None,
    on_report: Optional[SummaryCallback] = None,
) -> DonationSummary:
    """
    Run every record of `source` through `gateway` and return the summary.

    Parameters
    ----------
    source : RecordSource
        Decrypted donation records.
    gateway : PaymentGateway
        Shared by all worker threads.
    interval_seconds : float | None
        Minimum spacing between worker starts. Defaults to settings.
    max_workers : int | None
        Thread pool size. Defaults to settings.
    currency : str | None
        Currency charged for every donation. Defaults to settings.
    top_count : int | None
        How many top donors to report. Defaults to settings.
    on_report : Callable[[DonationSummary], None] | None
        Invoked exactly once, after every worker has finished.
    """
    settings = get_settings()
    interval = (
        interval_seconds if interval_seconds is not None else settings.dispatch_interval_ms / 1000.0
    )
    pool_size = max_workers or settings.dispatch_max_workers
    run_currency = currency or settings.donation_currency
    count = top_count if top_count is not None else settings.top_donors

    aggregator = Aggregator()
    barrier = CompletionBarrier(aggregator.snapshot)
    worker = DonationWorker(gateway, aggregator, currency=run_currency)
    summaries: List[DonationSummary] = []

    log.info(
        f"[RUN START] gateway={gateway.name}",
        extra={"gateway": gateway.name, "interval_seconds": interval, "max_workers": pool_size},
    )
    with profile_block("donation-run") as stats:

        def _deliver(state: AggregateState) -> None:
            summary = build_summary(
                state,
                currency=run_currency,
                top_count=count,
                duration_seconds=time.perf_counter() - stats.start_ts,
            )
            summaries.append(summary)
            if on_report is not None:
                on_report(summary)

        with Dispatcher(worker, barrier, IntervalGate(interval), max_workers=pool_size) as dispatcher:
            dispatcher.dispatch(source.records())
            barrier.wait(callback=_deliver)

    summary = summaries[0]
    log.info(
        "[RUN COMPLETE]",
        extra={
            "records": summary.records,
            "succeeded": summary.succeeded,
            "failed": summary.failed,
            "duration": round(stats.duration_seconds, 3),
            "peak_rss_bytes": stats.peak_rss_bytes,
            "cpu_percent": stats.cpu_percent,
        },
    )
    return summary


def run_donations(
    path: Path | str,
    gateway: Optional[PaymentGateway] = None,
    interval_seconds: Optional[float] = None,
    max_workers: Optional[int] = None,
    on_report: Optional[SummaryCallback] = None,
) -> DonationSummary:
    """
    Decrypt a donation file and process every record in it.

    A gateway built here from settings is closed when the run ends; a gateway
    passed in by the caller is left open.

    Raises
    ------
    InputFileError
        If the file cannot be read.
    GatewayConfigurationError
        If no gateway was passed and the Omise client cannot be built.
    """
    source = RecordSource.from_path(path)
    line_count = source.line_count()
    log.info(f"[SOURCE] {path}", extra={"path": str(path), "lines": line_count})

    owns_gateway = gateway is None
    active_gateway = gateway or OmiseGateway.from_settings()
    try:
        summary = process_source(
            source,
            active_gateway,
            interval_seconds=interval_seconds,
            max_workers=max_workers,
            on_report=on_report,
        )
    finally:
        if owns_gateway:
            active_gateway.close()

    if line_count - 1 != summary.records:
        log.debug(
            "[SOURCE] Record count differs from raw line count minus header",
            extra={"lines": line_count, "records": summary.records},
        )
    return summary


def persist_summary(summary: DonationSummary, output_path: Path | str) -> Path:
    """Write the summary as JSON, creating parent directories as needed."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(summary.model_dump(mode="json"), f, indent=2, sort_keys=True)
    log.info("Summary persisted", extra={"path": str(path)})
    return path


__all__ = [
    "build_summary",
    "persist_summary",
    "process_source",
    "run_donations",
]
