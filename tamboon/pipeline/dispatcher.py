"""
Rate-limited dispatcher for donation workers.

The dispatcher walks the record source on the calling thread. Before each
record it passes through an `IntervalGate`, which spaces consecutive starts by
at least one fixed interval, then registers the unit of work with the
completion barrier and hands it to a thread pool. It never waits for a worker
to finish: the interval bounds the start rate, not the completion rate.

A worker slot is reserved before the gate is entered, so the pool never
holds a backlog of queued records. When every slot is busy the dispatcher
blocks, and each later start still goes through the gate.
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Iterable, List, Optional

from tamboon.pipeline.synchronizer import CompletionBarrier
from tamboon.utils.logging import get_logger

log = get_logger(__name__)


class IntervalGate:
    """
    Fixed-interval gate: consecutive `wait()` calls return at least
    `interval_seconds` apart. The first call passes immediately.
    """

    def __init__(
        self,
        interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._last_pass: Optional[float] = None

    def wait(self) -> float:
        """Block until the gate opens; return the pass timestamp."""
        now = self._clock()
        if self._last_pass is not None:
            target = self._last_pass + self.interval_seconds
            while now < target:
                self._sleep(target - now)
                now = self._clock()
        self._last_pass = now
        return now


class Dispatcher:
    """
    Submits one worker invocation per record, paced by an `IntervalGate`.

    Parameters
    ----------
    worker : Callable[[str], Any]
        Invoked on a pool thread with one raw record line.
    barrier : CompletionBarrier
        Tracks every dispatched unit of work.
    gate : IntervalGate
        Owned pacing gate.
    max_workers : int
        Upper bound on simultaneously running workers. Dispatching blocks
        while every slot is taken.
    """

    def __init__(
        self,
        worker: Callable[[str], Any],
        barrier: CompletionBarrier,
        gate: IntervalGate,
        max_workers: int = 64,
    ) -> None:
        self._worker = worker
        self._barrier = barrier
        self._gate = gate
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="donation")
        self._slots = threading.BoundedSemaphore(max_workers)
        self.dispatch_times: List[float] = []

    def _run(self, line: str) -> Any:
        try:
            return self._worker(line)
        finally:
            self._slots.release()
            self._barrier.done()

    @staticmethod
    def _report_crash(future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            log.error("[DISPATCH] Worker task crashed", exc_info=exc)

    def dispatch(self, records: Iterable[str]) -> int:
        """
        Dispatch every record and return how many were dispatched.

        The barrier is closed when the records are exhausted (or dispatching
        stops on an error), so a later `barrier.wait()` cannot hang.
        """
        dispatched = 0
        try:
            for line in records:
                self._slots.acquire()
                try:
                    self.dispatch_times.append(self._gate.wait())
                    self._barrier.register()
                except Exception:
                    self._slots.release()
                    raise
                try:
                    future = self._executor.submit(self._run, line)
                except RuntimeError:
                    self._barrier.done()
                    self._slots.release()
                    raise
                future.add_done_callback(self._report_crash)
                dispatched += 1
                log.debug(f"[DISPATCH] record #{dispatched}", extra={"dispatched": dispatched})
        finally:
            self._barrier.close()
            # Running workers finish on their own; callers wait on the barrier.
            self._executor.shutdown(wait=False)
        log.info(
            f"[DISPATCH COMPLETE] {dispatched} record(s) dispatched",
            extra={"dispatched": dispatched, "interval_seconds": self._gate.interval_seconds},
        )
        return dispatched

    def close(self) -> None:
        """Wait for the pool threads to exit."""
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "Dispatcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["Dispatcher", "IntervalGate"]
