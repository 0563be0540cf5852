"""
Omise payment gateway client.

Talks to the Omise REST API over httpx:

- `POST {vault_url}/tokens`  (public key) exchanges card details for a token
- `POST {api_url}/charges`   (secret key) charges an amount against a token

Both keys are sent as the basic-auth user name with an empty password.
Transport errors, non-2xx responses and `"object": "error"` payloads are all
reported as faults; nothing is retried.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from tamboon.config import Settings, get_settings
from tamboon.domain.models import Charge, GatewayResult, Token
from tamboon.exceptions import GatewayConfigurationError, GatewayError
from tamboon.gateway.abstract import PaymentGateway
from tamboon.utils.logging import get_logger

log = get_logger(__name__)


class OmiseGateway(PaymentGateway):
    """
    Thread-safe Omise client; one instance is shared by every worker thread.
    """

    name: str = "omise"

    def __init__(
        self,
        public_key: str,
        secret_key: str,
        api_url: str = "https://api.omise.co",
        vault_url: str = "https://vault.omise.co",
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not public_key or not secret_key:
            raise GatewayConfigurationError(
                "Omise public and secret keys are required (OMISE_PUBLIC_KEY, OMISE_SECRET_KEY)"
            )
        self._public_key = public_key
        self._secret_key = secret_key
        self._api_url = api_url.rstrip("/")
        self._vault_url = vault_url.rstrip("/")
        self._client = httpx.Client(timeout=timeout_seconds, transport=transport)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "OmiseGateway":
        settings = settings or get_settings()
        return cls(
            public_key=settings.omise_public_key,
            secret_key=settings.omise_secret_key,
            api_url=settings.omise_api_url,
            vault_url=settings.omise_vault_url,
            timeout_seconds=settings.gateway_timeout_seconds,
        )

    def _post(self, url: str, key: str, data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._client.post(url, data=data, auth=(key, ""))
        except httpx.HTTPError as exc:
            raise GatewayError(f"transport error: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise GatewayError(
                f"unexpected non-JSON response (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from exc

        if not isinstance(payload, dict):
            raise GatewayError("unexpected response shape", status_code=response.status_code)
        if payload.get("object") == "error" or response.is_error:
            raise GatewayError(
                payload.get("message") or f"HTTP {response.status_code}",
                code=payload.get("code"),
                status_code=response.status_code,
            )
        return payload

    def create_token(
        self, name: str, number: str, expiration_month: int, expiration_year: int
    ) -> GatewayResult[Token]:
        try:
            payload = self._post(
                f"{self._vault_url}/tokens",
                self._public_key,
                {
                    "card[name]": name,
                    "card[number]": number,
                    "card[expiration_month]": str(expiration_month),
                    "card[expiration_year]": str(expiration_year),
                },
            )
            return GatewayResult.ok(Token.model_validate(payload))
        except GatewayError as exc:
            return GatewayResult.fault(_describe(exc))
        except ValidationError as exc:
            return GatewayResult.fault(f"malformed token response: {exc.error_count()} error(s)")

    def create_charge(self, amount: int, currency: str, token_id: str) -> GatewayResult[Charge]:
        try:
            payload = self._post(
                f"{self._api_url}/charges",
                self._secret_key,
                {"amount": str(amount), "currency": currency, "card": token_id},
            )
            return GatewayResult.ok(Charge.model_validate(payload))
        except GatewayError as exc:
            return GatewayResult.fault(_describe(exc))
        except ValidationError as exc:
            return GatewayResult.fault(f"malformed charge response: {exc.error_count()} error(s)")

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "OmiseGateway":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _describe(exc: GatewayError) -> str:
    return f"{exc.code}: {exc}" if exc.code else str(exc)


__all__ = ["OmiseGateway"]
