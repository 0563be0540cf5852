"""
Donation worker: one raw record in, one aggregated outcome out.

Runs on a pool thread. Each invocation parses its record, tokenizes the
card, charges the requested amount and records exactly one outcome. Any
failure is terminal for that record (no retry) and is contained here:
the dispatcher never sees it.
"""

from __future__ import annotations

from typing import List

from pydantic import ValidationError

from tamboon.domain.models import ChargeOutcome, Donor
from tamboon.exceptions import RecordError
from tamboon.gateway.abstract import PaymentGateway
from tamboon.pipeline.aggregator import Aggregator
from tamboon.utils.logging import get_logger

log = get_logger(__name__)

# Name, AmountSubunits, CCNumber, CVV, ExpMonth, ExpYear
RECORD_FIELDS = 6


def split_record(line: str) -> List[str]:
    fields = [value.strip() for value in line.split(",")]
    if len(fields) != RECORD_FIELDS:
        raise RecordError(f"expected {RECORD_FIELDS} fields, got {len(fields)}")
    return fields


def _parse_int(value: str, field_name: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise RecordError(f"{field_name} is not an integer: {value!r}") from exc


def parse_donor(line: str, currency: str) -> Donor:
    """
    Build a validated Donor from one raw record line.

    Raises
    ------
    RecordError
        If the record has the wrong field count or invalid values. The error
        carries the requested amount when that field could be parsed.
    """
    fields = split_record(line)
    name, raw_amount, card_number, _cvv, raw_month, raw_year = fields
    amount = _parse_int(raw_amount, "amount")
    requested = max(amount, 0)
    try:
        month = _parse_int(raw_month, "expiration month")
        year = _parse_int(raw_year, "expiration year")
        return Donor(
            name=name,
            amount_subunits=amount,
            currency=currency,
            card_number=card_number,
            expiration_month=month,
            expiration_year=year,
        )
    except RecordError as exc:
        raise RecordError(str(exc), requested_amount=requested) from exc
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise RecordError(problems, requested_amount=requested) from exc


def _donor_label(line: str) -> str:
    return line.split(",", 1)[0].strip() or "<unknown>"


class DonationWorker:
    """
    Tokenize-then-charge sequence for a single donation record.
    """

    def __init__(self, gateway: PaymentGateway, aggregator: Aggregator, currency: str = "thb") -> None:
        self._gateway = gateway
        self._aggregator = aggregator
        self._currency = currency

    def process(self, line: str) -> ChargeOutcome:
        outcome = self._attempt(line)
        self._aggregator.record(outcome)
        if not outcome.succeeded:
            log.warning(
                f"[DONATION FAULT] {outcome.donor_name} ({outcome.failure_stage}): {outcome.failure_reason}",
                extra={
                    "donor": outcome.donor_name,
                    "stage": outcome.failure_stage,
                    "reason": outcome.failure_reason,
                    "requested": outcome.requested_amount,
                },
            )
        else:
            log.debug(
                f"[DONATION OK] {outcome.donor_name}",
                extra={"donor": outcome.donor_name, "charged": outcome.charged_amount},
            )
        return outcome

    __call__ = process

    def _attempt(self, line: str) -> ChargeOutcome:
        try:
            donor = parse_donor(line, self._currency)
        except RecordError as exc:
            return ChargeOutcome.faulty(_donor_label(line), exc.requested_amount, "parse", str(exc))

        try:
            return self._charge(donor)
        except Exception as exc:  # noqa: BLE001
            log.exception(f"[DONATION ERROR] {donor.name}", extra={"donor": donor.name})
            return ChargeOutcome.faulty(
                donor.name, donor.amount_subunits, "error", f"{type(exc).__name__}: {exc}"
            )

    def _charge(self, donor: Donor) -> ChargeOutcome:
        token = self._gateway.create_token(
            name=donor.name,
            number=donor.card_number,
            expiration_month=donor.expiration_month,
            expiration_year=donor.expiration_year,
        )
        if not token.is_ok or token.value is None:
            return ChargeOutcome.faulty(donor.name, donor.amount_subunits, "token", token.reason or "no token")

        charge = self._gateway.create_charge(
            amount=donor.amount_subunits,
            currency=donor.currency,
            token_id=token.value.id,
        )
        if not charge.is_ok or charge.value is None:
            return ChargeOutcome.faulty(donor.name, donor.amount_subunits, "charge", charge.reason or "no charge")
        if not charge.value.succeeded:
            reason = charge.value.failure_message or charge.value.failure_code or charge.value.status
            return ChargeOutcome.faulty(donor.name, donor.amount_subunits, "charge", reason)

        charged = charge.value.amount
        if charged > donor.amount_subunits:
            # Totals never count more than was requested.
            log.warning(
                f"[DONATION MISMATCH] {donor.name}: gateway charged {charged}, requested {donor.amount_subunits}",
                extra={"donor": donor.name, "charged": charged, "requested": donor.amount_subunits},
            )
            charged = donor.amount_subunits

        return ChargeOutcome(
            donor_name=donor.name,
            requested_amount=donor.amount_subunits,
            charged_amount=charged,
            succeeded=True,
        )


__all__ = ["DonationWorker", "RECORD_FIELDS", "parse_donor", "split_record"]
