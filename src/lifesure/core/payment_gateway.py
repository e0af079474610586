# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Payment gateway collaborator.

The gateway owns the card ledger; this module only creates payment intents
and reads them back. Amounts cross this boundary in minor currency units.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

import httpx
from beartype import beartype
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import Settings
from .errors import ServiceError
from .logging_utils import get_logger
from .result_types import Err, Ok, Result

logger = get_logger(__name__)

INTENT_SUCCEEDED = "succeeded"
INTENT_OBJECT = "payment_intent"
_INTENT_ID = re.compile(r"pi_[A-Za-z0-9_]+")


class PaymentIntent(BaseModel):
    """The gateway's view of one payment."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )

    id: str = Field(..., min_length=1, description="Gateway payment intent id")
    amount: int = Field(..., ge=0, description="Amount in minor currency units")
    currency: str = Field(default="usd", description="ISO currency code")
    status: str = Field(..., description="Gateway status, e.g. succeeded")
    client_secret: str | None = Field(
        default=None, description="Secret handed to the browser to confirm the card"
    )
    metadata: dict[str, str] = Field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        """Whether the gateway reports the payment as captured."""
        return self.status == INTENT_SUCCEEDED


class PaymentGateway(ABC):
    """Contract consumed by the payment recorder."""

    @abstractmethod
    async def create_payment_intent(
        self,
        amount_minor: int,
        currency: str,
        receipt_email: str,
        metadata: Mapping[str, str],
    ) -> Result[PaymentIntent, ServiceError]:
        """Create an intent and return it with its client secret."""

    @abstractmethod
    async def retrieve_payment_intent(
        self, intent_id: str
    ) -> Result[PaymentIntent, ServiceError]:
        """Fetch an intent by id."""

    async def aclose(self) -> None:
        """Release transport resources."""


def _gateway_message(response: httpx.Response) -> str:
    try:
        body: Any = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return str(body["error"].get("message") or body["error"].get("type"))
    return f"HTTP {response.status_code}"


class StripePaymentGateway(PaymentGateway):
    """Stripe REST client (form-encoded requests, secret key auth)."""

    def __init__(
        self,
        secret_key: str,
        *,
        base_url: str = "https://api.stripe.com",
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create the client; pass ``client`` to reuse or mock a transport."""
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._headers = {"Authorization": f"Bearer {secret_key}"}

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripePaymentGateway":
        """Build the client from application settings."""
        return cls(
            settings.payment_gateway_secret_key,
            base_url=settings.payment_gateway_url,
            timeout=settings.payment_gateway_timeout,
        )

    async def _send(
        self, method: str, path: str, data: Mapping[str, Any] | None = None
    ) -> Result[PaymentIntent, ServiceError]:
        try:
            response = await self._client.request(
                method, path, data=data, headers=self._headers
            )
        except httpx.TimeoutException:
            logger.error("Payment gateway timed out on %s %s", method, path)
            return Err(ServiceError.external("Payment gateway request timed out"))
        except httpx.RequestError as e:
            logger.error("Payment gateway unreachable: %s", e)
            return Err(ServiceError.external(f"Payment gateway unreachable: {e}"))

        if response.status_code >= 400:
            message = _gateway_message(response)
            logger.warning("Payment gateway refused %s %s: %s", method, path, message)
            return Err(ServiceError.external(message))

        try:
            body: Any = response.json()
        except ValueError:
            logger.error("Payment gateway sent a non-JSON body on %s %s", method, path)
            return Err(ServiceError.external("Payment gateway sent an unreadable response"))
        if not isinstance(body, dict) or body.get("object") != INTENT_OBJECT:
            logger.error("Payment gateway sent no payment intent on %s %s", method, path)
            return Err(ServiceError.external("Payment gateway response is not a payment intent"))
        try:
            return Ok(PaymentIntent.model_validate(body))
        except ValidationError as e:
            logger.error("Payment gateway sent a malformed intent: %s", e)
            return Err(ServiceError.external("Payment gateway sent a malformed payment intent"))

    @beartype
    async def create_payment_intent(
        self,
        amount_minor: int,
        currency: str,
        receipt_email: str,
        metadata: Mapping[str, str],
    ) -> Result[PaymentIntent, ServiceError]:
        """Create an intent for card payment."""
        form: dict[str, Any] = {
            "amount": amount_minor,
            "currency": currency,
            "receipt_email": receipt_email,
            "payment_method_types[]": "card",
        }
        for key, value in metadata.items():
            form[f"metadata[{key}]"] = value
        return await self._send("POST", "/v1/payment_intents", form)

    @beartype
    async def retrieve_payment_intent(
        self, intent_id: str
    ) -> Result[PaymentIntent, ServiceError]:
        """Fetch an intent by id; ids that are not intent ids never leave the process."""
        if not _INTENT_ID.fullmatch(intent_id):
            return Err(
                ServiceError.validation(
                    f"Malformed payment intent id: {intent_id!r}", "paymentIntentId"
                )
            )
        return await self._send("GET", f"/v1/payment_intents/{intent_id}")

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
