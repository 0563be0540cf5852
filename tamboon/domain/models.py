"""
Domain models for Tamboon.

Pydantic models describe the validated shapes that cross component
boundaries: donors built from input records, gateway tokens and charges,
and the final donation summary. Per-record outcomes and aggregate snapshots
are plain frozen dataclasses because they are created on the hot path of
every worker thread.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

FailureStage = Literal["parse", "token", "charge", "error"]


class Donor(BaseModel):
    """
    A donation record validated and ready for charge submission.
    """

    name: str = Field(..., description="Donor display name (also the card holder name).")
    amount_subunits: int = Field(..., ge=0, description="Requested amount in minor units.")
    currency: str = Field(..., min_length=3, max_length=3, description="ISO currency code.")
    card_number: str = Field(..., min_length=1, description="Raw card number.")
    expiration_month: int = Field(..., ge=1, le=12)
    expiration_year: int = Field(..., ge=0)

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
    }


class Token(BaseModel):
    """Opaque single-use card reference returned by the gateway."""

    id: str
    used: bool = False

    model_config = {"frozen": True, "extra": "ignore"}


class Charge(BaseModel):
    """Result of debiting a card through its token."""

    id: str
    amount: int = Field(0, ge=0)
    currency: str = ""
    status: str = "pending"
    paid: bool = False
    failure_code: Optional[str] = None
    failure_message: Optional[str] = None

    model_config = {"frozen": True, "extra": "ignore"}

    @property
    def succeeded(self) -> bool:
        return self.status == "successful" or self.paid


@dataclass(frozen=True)
class GatewayResult(Generic[T]):
    """
    Success/fault variant returned by every gateway operation.

    Exactly one of `value` and `reason` is set.
    """

    value: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> "GatewayResult[T]":
        return cls(value=value)

    @classmethod
    def fault(cls, reason: str) -> "GatewayResult[T]":
        return cls(reason=reason)

    @property
    def is_ok(self) -> bool:
        return self.reason is None


@dataclass(frozen=True)
class ChargeOutcome:
    """Result of one donation worker invocation."""

    donor_name: str
    requested_amount: int
    charged_amount: int = 0
    succeeded: bool = False
    failure_stage: Optional[FailureStage] = None
    failure_reason: Optional[str] = None

    @classmethod
    def faulty(
        cls, donor_name: str, requested_amount: int, stage: FailureStage, reason: str
    ) -> "ChargeOutcome":
        return cls(
            donor_name=donor_name,
            requested_amount=requested_amount,
            failure_stage=stage,
            failure_reason=reason,
        )


@dataclass(frozen=True)
class AggregateState:
    """
    Immutable snapshot of the aggregator.

    `ranking` maps a charged amount to the donor name that was written last
    for that amount; donors charged identical amounts collide.
    """

    total_requested: int = 0
    total_charged: int = 0
    processed: int = 0
    succeeded: int = 0
    ranking: Dict[int, str] = field(default_factory=dict)

    @property
    def faulty_amount(self) -> int:
        return self.total_requested - self.total_charged

    @property
    def failed(self) -> int:
        return self.processed - self.succeeded


class DonationSummary(BaseModel):
    """
    Final report of a donation run.
    """

    currency: str = Field(..., description="Currency of every amount in the report.")
    total_requested: int = Field(0, ge=0)
    total_charged: int = Field(0, ge=0)
    faulty_amount: int = Field(0, ge=0)
    average_per_donor: int = Field(0, ge=0, description="Charged total divided by records processed.")
    records: int = Field(0, ge=0)
    succeeded: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
    top_donors: List[str] = Field(default_factory=list)
    duration_seconds: float = Field(0.0, ge=0.0)

    model_config = {"frozen": True}


__all__ = [
    "AggregateState",
    "Charge",
    "ChargeOutcome",
    "DonationSummary",
    "Donor",
    "FailureStage",
    "GatewayResult",
    "Token",
]
