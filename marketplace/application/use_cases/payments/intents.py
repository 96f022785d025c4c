"""Creation of charge authorizations for a finalized total."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol

from marketplace.domain.entities import Jurisdiction

logger = logging.getLogger(__name__)

SERVICE_LOCATION_NAME = "Service location"


class InvalidAmountError(ValueError):
    """Raised when a charge amount is not a finite positive whole number."""

    def __init__(self, amount: Any) -> None:
        self.amount = amount
        super().__init__("Invalid amount")


class PaymentGateway(Protocol):
    async def create_payment_intent(
        self,
        amount: int,
        *,
        currency: str,
        metadata: Mapping[str, str],
        shipping: Mapping[str, Any] | None = None,
        idempotency_key: str | None = None,
    ) -> str: ...


def validate_amount(value: Any) -> int:
    """Return ``value`` as positive minor units or raise :class:`InvalidAmountError`."""

    if value is None or isinstance(value, bool):
        raise InvalidAmountError(value)
    try:
        number = Decimal(value.strip()) if isinstance(value, str) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidAmountError(value) from exc
    if not number.is_finite() or number <= 0 or number != number.to_integral_value():
        raise InvalidAmountError(value)
    return int(number)


class PaymentIntentBuilder:
    """Request a pending charge for a checkout total.

    Each call creates a new authorization. No idempotency key is derived
    here; callers that retry must pass their own.
    """

    def __init__(self, gateway: PaymentGateway, *, currency: str = "usd", country: str = "US") -> None:
        self._gateway = gateway
        self._currency = currency
        self._country = country

    async def create_intent(
        self,
        amount: Any,
        *,
        jurisdiction: Jurisdiction | None = None,
        metadata: Mapping[str, Any] | None = None,
        idempotency_key: str | None = None,
    ) -> str:
        """Return the client confirmation secret of a new charge authorization."""

        amount_cents = validate_amount(amount)
        charge_metadata = {str(key): str(value) for key, value in (metadata or {}).items()}
        shipping = None
        if jurisdiction is not None and not jurisdiction.is_empty:
            charge_metadata.update(_jurisdiction_metadata(jurisdiction))
            # The gateway needs a postal code or street line for a shipping address.
            if jurisdiction.has_address:
                shipping = self._service_location(jurisdiction)

        client_secret = await self._gateway.create_payment_intent(
            amount_cents,
            currency=self._currency,
            metadata=charge_metadata,
            shipping=shipping,
            idempotency_key=idempotency_key,
        )
        logger.info("Payment intent created for %s %s", amount_cents, self._currency)
        return client_secret

    def _service_location(self, jurisdiction: Jurisdiction) -> dict[str, Any]:
        address: dict[str, Any] = {"country": self._country}
        if jurisdiction.service_address:
            address["line1"] = jurisdiction.service_address
        if jurisdiction.postal_code:
            address["postal_code"] = jurisdiction.postal_code
        if jurisdiction.state:
            address["state"] = jurisdiction.state
        return {"name": SERVICE_LOCATION_NAME, "address": address}


def _jurisdiction_metadata(jurisdiction: Jurisdiction) -> dict[str, str]:
    metadata: dict[str, str] = {}
    if jurisdiction.service_address:
        metadata["service_address"] = jurisdiction.service_address
    if jurisdiction.postal_code:
        metadata["tax_postal_code"] = jurisdiction.postal_code
    if jurisdiction.state:
        metadata["tax_state"] = jurisdiction.state
    return metadata


__all__ = [
    "InvalidAmountError",
    "PaymentGateway",
    "PaymentIntentBuilder",
    "validate_amount",
]
