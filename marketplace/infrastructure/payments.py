"""Stripe client wrapper for charge authorizations and tax calculations."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from functools import partial
from typing import Any

import anyio
import stripe

from marketplace.config import Settings
from marketplace.domain.entities import Jurisdiction

logger = logging.getLogger(__name__)


class PaymentGatewayError(RuntimeError):
    """Raised when the payment gateway is unavailable or rejects a request."""


@dataclass(frozen=True)
class TaxQuote:
    """Exclusive tax and total returned by the tax calculation service."""

    tax: int
    total: int


class StripeGateway:
    """Issue payment intents and tax calculations through Stripe.

    The Stripe SDK is blocking, so every call runs in a worker thread.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        api_version: str | None = None,
        country: str = "US",
        default_state: str | None = None,
        line_item_reference: str = "detailing_service",
    ) -> None:
        self._api_key = api_key
        self._api_version = api_version
        self._country = country
        self._default_state = default_state
        self._line_item_reference = line_item_reference
        if not api_key:
            logger.warning("Stripe secret key not configured; payment gateway disabled")

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripeGateway":
        return cls(
            settings.stripe_secret_key,
            api_version=settings.stripe_api_version,
            country=settings.tax_country,
            default_state=settings.tax_default_state,
            line_item_reference=settings.tax_line_item_reference,
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def create_payment_intent(
        self,
        amount: int,
        *,
        currency: str,
        metadata: Mapping[str, str],
        shipping: Mapping[str, Any] | None = None,
        idempotency_key: str | None = None,
    ) -> str:
        """Create one pending charge authorization and return its client secret."""

        params: dict[str, Any] = {
            "amount": amount,
            "currency": currency,
            "automatic_payment_methods": {"enabled": True},
            "metadata": dict(metadata),
        }
        if shipping:
            params["shipping"] = dict(shipping)
        if idempotency_key:
            params["idempotency_key"] = idempotency_key

        intent = await self._call(stripe.PaymentIntent.create, **params)
        client_secret = getattr(intent, "client_secret", None)
        if not client_secret:
            raise PaymentGatewayError("Payment gateway returned no client secret")
        return client_secret

    async def calculate_tax(
        self, amount: int, jurisdiction: Jurisdiction, *, currency: str
    ) -> TaxQuote:
        """Compute exclusive tax for ``amount`` as a single line item."""

        address: dict[str, Any] = {"country": self._country}
        if jurisdiction.service_address:
            address["line1"] = jurisdiction.service_address
        if jurisdiction.postal_code:
            address["postal_code"] = jurisdiction.postal_code
        state = jurisdiction.state or self._default_state
        if state:
            address["state"] = state

        calculation = await self._call(
            stripe.tax.Calculation.create,
            currency=currency,
            line_items=[{"amount": amount, "reference": self._line_item_reference}],
            customer_details={"address": address, "address_source": "shipping"},
        )
        return TaxQuote(
            tax=int(calculation.tax_amount_exclusive),
            total=int(calculation.amount_total),
        )

    async def _call(self, method: Any, **params: Any) -> Any:
        if not self._api_key:
            raise PaymentGatewayError("Payment gateway not configured")
        params["api_key"] = self._api_key
        if self._api_version:
            params["stripe_version"] = self._api_version
        try:
            return await anyio.to_thread.run_sync(partial(method, **params))
        except stripe.StripeError as exc:
            message = getattr(exc, "user_message", None) or str(exc) or "Stripe error"
            raise PaymentGatewayError(message) from exc


__all__ = ["PaymentGatewayError", "StripeGateway", "TaxQuote"]
