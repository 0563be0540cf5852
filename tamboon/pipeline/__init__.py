"""
Pipeline package for Tamboon.

Record source -> rate-limited dispatcher -> concurrent donation workers ->
synchronized aggregator -> completion barrier.
"""

from tamboon.pipeline.aggregator import Aggregator, top_donors
from tamboon.pipeline.dispatcher import Dispatcher, IntervalGate
from tamboon.pipeline.source import RecordSource, count_lines
from tamboon.pipeline.synchronizer import BarrierState, CompletionBarrier
from tamboon.pipeline.worker import DonationWorker, parse_donor

__all__ = [
    "Aggregator",
    "BarrierState",
    "CompletionBarrier",
    "Dispatcher",
    "DonationWorker",
    "IntervalGate",
    "RecordSource",
    "count_lines",
    "parse_donor",
    "top_donors",
]
