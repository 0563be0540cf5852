"""
In-process payment gateway used for dry runs and tests.

Applies the same business rules a card processor would reject on (Luhn
check, expired card, declined card numbers) and can inject artificial
latency so concurrent behaviour is exercised without touching the network.
"""

from __future__ import annotations

import itertools
import random
import threading
import time
from datetime import date
from typing import Callable, Iterable, Optional, Union

from tamboon.domain.models import Charge, GatewayResult, Token
from tamboon.gateway.abstract import PaymentGateway

Latency = Union[float, Callable[[], float]]


def luhn_valid(number: str) -> bool:
    digits = [int(ch) for ch in number if ch.isdigit()]
    if len(digits) < 12 or len(digits) != len(number.replace(" ", "")):
        return False
    checksum = 0
    for index, digit in enumerate(reversed(digits)):
        if index % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        checksum += digit
    return checksum % 10 == 0


class SimulatedGateway(PaymentGateway):
    """
    Deterministic stand-in for a remote payment gateway.

    Parameters
    ----------
    latency : float | Callable[[], float]
        Seconds to sleep inside every call (a callable is sampled per call).
    declined_cards : iterable[str]
        Card numbers that tokenize fine but whose charges fail.
    today : date | None
        Reference date for expiry checks; defaults to the current date.
    validate_luhn : bool
        Reject card numbers failing the Luhn checksum at tokenization.
    """

    name: str = "simulated"

    def __init__(
        self,
        latency: Latency = 0.0,
        declined_cards: Iterable[str] = (),
        today: Optional[date] = None,
        validate_luhn: bool = True,
    ) -> None:
        self._latency = latency
        self._declined = frozenset(declined_cards)
        self._today = today
        self._validate_luhn = validate_luhn
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._tokens: dict[str, str] = {}
        self.token_calls = 0
        self.charge_calls = 0

    def _sleep(self) -> None:
        delay = self._latency() if callable(self._latency) else self._latency
        if delay > 0:
            time.sleep(delay)

    def _next_id(self, prefix: str) -> str:
        with self._lock:
            return f"{prefix}_test_{next(self._ids):08d}"

    def create_token(
        self, name: str, number: str, expiration_month: int, expiration_year: int
    ) -> GatewayResult[Token]:
        with self._lock:
            self.token_calls += 1
        self._sleep()
        if self._validate_luhn and not luhn_valid(number):
            return GatewayResult.fault("invalid_card: number is invalid")
        today = self._today or date.today()
        if (expiration_year, expiration_month) < (today.year, today.month):
            return GatewayResult.fault("invalid_card: expiration date cannot be in the past")
        token_id = self._next_id("tokn")
        with self._lock:
            self._tokens[token_id] = number
        return GatewayResult.ok(Token(id=token_id))

    def create_charge(self, amount: int, currency: str, token_id: str) -> GatewayResult[Charge]:
        with self._lock:
            self.charge_calls += 1
            number = self._tokens.pop(token_id, None)
        self._sleep()
        if number is None:
            return GatewayResult.fault("used_token: token was not found or already used")
        charge_id = self._next_id("chrg")
        if number in self._declined:
            return GatewayResult.ok(
                Charge(
                    id=charge_id,
                    amount=amount,
                    currency=currency,
                    status="failed",
                    failure_code="payment_rejected",
                    failure_message="payment was rejected by the issuer",
                )
            )
        return GatewayResult.ok(
            Charge(id=charge_id, amount=amount, currency=currency, status="successful", paid=True)
        )

    def close(self) -> None:
        return None


def random_latency(low: float, high: float, seed: Optional[int] = None) -> Callable[[], float]:
    """Thread-safe uniform latency sampler for `SimulatedGateway`."""
    rng = random.Random(seed)
    lock = threading.Lock()

    def sample() -> float:
        with lock:
            return rng.uniform(low, high)

    return sample


__all__ = ["SimulatedGateway", "luhn_valid", "random_latency"]
