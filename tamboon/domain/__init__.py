"""
Domain package for Tamboon.

Exports the core domain models used across the pipeline, gateway and reporter.
Keep this package focused on data definitions and validation concerns.
"""

from tamboon.domain.models import (
    AggregateState,
    Charge,
    ChargeOutcome,
    DonationSummary,
    Donor,
    GatewayResult,
    Token,
)

__all__ = [
    "AggregateState",
    "Charge",
    "ChargeOutcome",
    "DonationSummary",
    "Donor",
    "GatewayResult",
    "Token",
]
