"""Request and response bodies of the checkout endpoints."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _optional_text(value: Any) -> str | None:
    """Return scalar address input as text; anything else counts as missing."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        value = str(value)
    if not isinstance(value, str):
        return None
    return value.strip() or None


class _AddressFields(_CamelModel):
    """Address hints accepted loosely; unusable values are treated as absent."""

    zip_code: str | None = None
    state: str | None = None
    service_address: str | None = None

    @field_validator("zip_code", "state", "service_address", mode="before")
    @classmethod
    def _coerce_address_text(cls, value: Any) -> str | None:
        return _optional_text(value)


class TaxCalculationRequest(_AddressFields):
    """Subtotal and address used to estimate tax.

    ``amount_cents`` is accepted as-is; unusable values are estimated as zero.
    """

    amount_cents: Any = None


class TaxCalculationResponse(BaseModel):
    subtotal: int
    tax: int
    total: int


class PaymentIntentRequest(_AddressFields):
    amount_cents: Any = None
    metadata: dict[str, Any] | None = None


class PaymentIntentResponse(_CamelModel):
    client_secret: str


__all__ = [
    "PaymentIntentRequest",
    "PaymentIntentResponse",
    "TaxCalculationRequest",
    "TaxCalculationResponse",
]
