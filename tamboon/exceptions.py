"""
Exception hierarchy for Tamboon.

Fatal startup errors (`InputFileError`, `GatewayConfigurationError`) abort a
run before any record is dispatched. Everything raised while processing a
single record is contained by the donation worker and turned into a faulty
outcome.
"""

from __future__ import annotations


class TamboonError(Exception):
    """Base class for all Tamboon errors."""


class InputFileError(TamboonError):
    """The donation input file is missing or cannot be read."""


class GatewayConfigurationError(TamboonError):
    """The payment gateway client cannot be constructed."""


class GatewayError(TamboonError):
    """A payment gateway call failed (transport error or API error object)."""

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class RecordError(TamboonError):
    """A donation record has the wrong shape or unparsable fields."""

    def __init__(self, message: str, requested_amount: int = 0) -> None:
        super().__init__(message)
        self.requested_amount = requested_amount


class BarrierError(TamboonError):
    """The completion barrier was used out of order."""


class BarrierClosedError(BarrierError):
    """Work was registered after the barrier stopped accepting it."""


__all__ = [
    "TamboonError",
    "InputFileError",
    "GatewayConfigurationError",
    "GatewayError",
    "RecordError",
    "BarrierError",
    "BarrierClosedError",
]
