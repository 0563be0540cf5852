"""
Thread-safe aggregation of donation outcomes.

Every worker thread calls `Aggregator.record` exactly once. The running
totals are commutative sums, so completion order does not matter for them.
The ranking table is keyed by charged amount: when two donors are charged
the same amount, whichever worker records last keeps the slot. Under
concurrency that is non-deterministic.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Mapping

from tamboon.domain.models import AggregateState, ChargeOutcome


class Aggregator:
    """
    Accumulates running totals and the charged-amount ranking table.

    One instance per run; pass it explicitly to the workers that feed it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total_requested = 0
        self._total_charged = 0
        self._processed = 0
        self._succeeded = 0
        self._ranking: Dict[int, str] = {}

    def record(self, outcome: ChargeOutcome) -> None:
        """Apply one outcome to the shared state as a single atomic update."""
        with self._lock:
            self._total_requested += outcome.requested_amount
            self._total_charged += outcome.charged_amount
            self._processed += 1
            if outcome.succeeded:
                self._succeeded += 1
            if outcome.charged_amount > 0:
                self._ranking[outcome.charged_amount] = outcome.donor_name

    def snapshot(self) -> AggregateState:
        with self._lock:
            return AggregateState(
                total_requested=self._total_requested,
                total_charged=self._total_charged,
                processed=self._processed,
                succeeded=self._succeeded,
                ranking=dict(self._ranking),
            )


def top_donors(ranking: Mapping[int, str], count: int = 3) -> List[str]:
    """
    Return the donors of the `count` largest charged amounts, largest first.

    Fewer entries than `count` yields as many as exist. There is no secondary
    tie-break: colliding amounts were already resolved by the ranking table.
    """
    if count <= 0:
        return []
    amounts = sorted(ranking)
    return [ranking[amount] for amount in reversed(amounts[-count:])]


__all__ = ["Aggregator", "top_donors"]
