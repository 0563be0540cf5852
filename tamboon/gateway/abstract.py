"""
Payment gateway interface for Tamboon.

Concrete gateways (the Omise HTTP client, the in-process simulator) implement
the `PaymentGateway` protocol and return `GatewayResult` values instead of
raising, so a failed call is a value the donation worker can record.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tamboon.domain.models import Charge, GatewayResult, Token


@runtime_checkable
class PaymentGateway(Protocol):
    """
    Common interface all payment gateways must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    """

    name: str

    def create_token(
        self, name: str, number: str, expiration_month: int, expiration_year: int
    ) -> GatewayResult[Token]:
        """
        Exchange card details for a single-use token.

        Returns
        -------
        GatewayResult[Token]
            The token, or a fault describing why the card was rejected.
        """
        ...

    def create_charge(self, amount: int, currency: str, token_id: str) -> GatewayResult[Charge]:
        """
        Charge `amount` minor units against a token.

        Returns
        -------
        GatewayResult[Charge]
            The charge as reported by the gateway, or a fault.
        """
        ...

    def close(self) -> None:
        """Release network resources held by the gateway."""
        ...


__all__ = ["PaymentGateway"]
