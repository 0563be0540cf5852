"""
Completion barrier for dispatched donation workers.

The barrier counts in-flight workers. The dispatcher registers each unit of
work before starting it and closes the barrier once the input is exhausted;
workers report completion from a `finally` block. `wait` releases once every
registered worker has finished, captures the final aggregate state a single
time and hands it to the reporting callback.

State machine::

    IDLE --register--> ACTIVE --close--> DRAINING --last done--> COMPLETE
      |                  |                                          ^
      +------close-------+------------(nothing in flight)-----------+
"""

from __future__ import annotations

import enum
import threading
from typing import Callable, Optional

from tamboon.domain.models import AggregateState
from tamboon.exceptions import BarrierClosedError, BarrierError
from tamboon.utils.logging import get_logger

log = get_logger(__name__)

ReportCallback = Callable[[AggregateState], None]


class BarrierState(str, enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"
    DRAINING = "draining"
    COMPLETE = "complete"


class CompletionBarrier:
    """
    Counting barrier that releases exactly once.

    Parameters
    ----------
    state_provider : Callable[[], AggregateState]
        Called once, after the last worker finishes, to capture the final
        aggregate state (usually `Aggregator.snapshot`).
    """

    def __init__(self, state_provider: Callable[[], AggregateState]) -> None:
        self._state_provider = state_provider
        self._cond = threading.Condition()
        self._in_flight = 0
        self._registered = 0
        self._closed = False
        self._state = BarrierState.IDLE
        self._final_state: Optional[AggregateState] = None

    @property
    def state(self) -> BarrierState:
        with self._cond:
            return self._state

    @property
    def in_flight(self) -> int:
        with self._cond:
            return self._in_flight

    @property
    def registered(self) -> int:
        with self._cond:
            return self._registered

    def register(self) -> None:
        """Account for one more unit of work. Call before starting it."""
        with self._cond:
            if self._closed:
                raise BarrierClosedError(f"Cannot register work: barrier is {self._state.value}")
            self._in_flight += 1
            self._registered += 1
            self._state = BarrierState.ACTIVE

    def done(self) -> None:
        """Mark one unit of work as finished."""
        with self._cond:
            if self._in_flight == 0:
                raise BarrierError("done() called with no work in flight")
            self._in_flight -= 1
            if self._in_flight == 0:
                self._cond.notify_all()

    def close(self) -> None:
        """Stop accepting work; the dispatcher has submitted everything."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            if self._in_flight > 0:
                self._state = BarrierState.DRAINING
            self._cond.notify_all()

    def _released(self) -> bool:
        if self._in_flight > 0:
            return False
        return self._closed or self._state is BarrierState.IDLE

    def wait(
        self, callback: Optional[ReportCallback] = None, timeout: Optional[float] = None
    ) -> AggregateState:
        """
        Block until every registered worker has finished.

        The first call to get through captures the final state, moves the
        barrier to COMPLETE and invokes `callback` with that state. Any later
        call returns the same state immediately; its callback is not invoked.

        Raises
        ------
        TimeoutError
            If `timeout` seconds pass with work still in flight.
        """
        with self._cond:
            if not self._cond.wait_for(self._released, timeout=timeout):
                raise TimeoutError(
                    f"{self._in_flight} worker(s) still in flight after {timeout}s"
                )
            if self._final_state is not None:
                return self._final_state
            self._closed = True
            self._state = BarrierState.COMPLETE
            self._final_state = self._state_provider()
            final_state = self._final_state
            registered = self._registered

        log.debug("[BARRIER] Released", extra={"registered": registered})
        if callback is not None:
            callback(final_state)
        return final_state


__all__ = ["BarrierState", "CompletionBarrier", "ReportCallback"]
