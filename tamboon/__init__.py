"""
Tamboon - concurrent, rate-limited donation batch processor.

Reads a ROT-128 obfuscated CSV of card donations, tokenizes and charges each
record through a payment gateway (Omise, or an in-process simulator), and
reports totals, faulty donations, the average per donor and the top donors.

The pipeline:

- Record source (decrypted lines, header skipped)
- Rate-limited dispatcher (fixed interval between worker starts)
- Donation workers on a thread pool (tokenize, then charge)
- Thread-safe aggregator
- Completion barrier that releases the final state exactly once
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from tamboon.config import Settings, get_settings
from tamboon.domain.models import AggregateState, ChargeOutcome, DonationSummary, Donor
from tamboon.gateway import OmiseGateway, PaymentGateway, SimulatedGateway
from tamboon.orchestrator import build_summary, process_source, run_donations
from tamboon.pipeline import (
    Aggregator,
    CompletionBarrier,
    Dispatcher,
    DonationWorker,
    IntervalGate,
    RecordSource,
    top_donors,
)
from tamboon.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "AggregateState",
    "ChargeOutcome",
    "DonationSummary",
    "Donor",
    # Gateways
    "OmiseGateway",
    "PaymentGateway",
    "SimulatedGateway",
    # Orchestration
    "build_summary",
    "process_source",
    "run_donations",
    # Pipeline
    "Aggregator",
    "CompletionBarrier",
    "Dispatcher",
    "DonationWorker",
    "IntervalGate",
    "RecordSource",
    "top_donors",
    # Logging
    "configure_logging",
    "get_logger",
]
