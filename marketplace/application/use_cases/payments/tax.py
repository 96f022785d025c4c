"""Tiered estimation of the tax owed on a subtotal.

1. Ask the tax calculation service (precise tier).
2. On any failure apply the regional flat rate (heuristic tier).
3. A missing or non-numeric subtotal is treated as zero before step 2.

``estimate`` never raises; it always returns a consistent breakdown.
"""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Protocol

from marketplace.domain.entities import Jurisdiction, TaxBreakdown
from marketplace.utils import Tier, TierResult, first_success

logger = logging.getLogger(__name__)

DEFAULT_FLAT_RATE = Decimal("0.0719")

SOURCE_PRECISE = "precise"
SOURCE_HEURISTIC = "heuristic"
SOURCE_DEGENERATE = "degenerate"


class TaxService(Protocol):
    async def calculate_tax(
        self, amount: int, jurisdiction: Jurisdiction, *, currency: str
    ) -> Any: ...


def coerce_subtotal(value: Any) -> int | None:
    """Return ``value`` as non-negative minor units, or ``None`` when unusable."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        value = Decimal(repr(value))
    if isinstance(value, str):
        try:
            value = Decimal(value.strip())
        except InvalidOperation:
            return None
    if isinstance(value, Decimal):
        if not value.is_finite() or value < 0:
            return None
        return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return None


def flat_rate_tax(subtotal: int, rate: Decimal) -> int:
    """Round ``subtotal * rate`` half up to whole minor units."""

    return int((Decimal(subtotal) * rate).quantize(Decimal(1), rounding=ROUND_HALF_UP))


class TaxEstimator:
    """Convert a subtotal and an address into a tax breakdown."""

    def __init__(
        self,
        service: TaxService | None,
        *,
        flat_rate: Decimal | float | str = DEFAULT_FLAT_RATE,
        currency: str = "usd",
    ) -> None:
        self._service = service
        self._flat_rate = Decimal(str(flat_rate))
        self._currency = currency

    @property
    def flat_rate(self) -> Decimal:
        return self._flat_rate

    async def estimate(self, subtotal: Any, jurisdiction: Jurisdiction | None = None) -> TaxBreakdown:
        jurisdiction = jurisdiction or Jurisdiction()
        amount = coerce_subtotal(subtotal)
        if amount is None:
            logger.warning("Unusable subtotal %r; estimating tax on zero", subtotal)
            return TaxBreakdown.from_parts(0, flat_rate_tax(0, self._flat_rate), source=SOURCE_DEGENERATE)

        result = await first_success(
            [
                Tier(SOURCE_PRECISE, lambda: self._precise(amount, jurisdiction)),
                Tier(SOURCE_HEURISTIC, lambda: self._heuristic(amount)),
            ]
        )
        return result.value  # type: ignore[return-value]

    async def _precise(self, amount: int, jurisdiction: Jurisdiction) -> TierResult[TaxBreakdown]:
        if self._service is None:
            return TierResult.failure(SOURCE_PRECISE, "tax service not configured")
        if amount <= 0:
            return TierResult.failure(SOURCE_PRECISE, "nothing to tax")
        if not jurisdiction.has_address:
            return TierResult.failure(SOURCE_PRECISE, "no postal code or service address")
        try:
            quote = await self._service.calculate_tax(amount, jurisdiction, currency=self._currency)
            tax = int(quote.tax)
            total = int(quote.total)
        except Exception as exc:
            return TierResult.failure(SOURCE_PRECISE, str(exc) or type(exc).__name__)
        if tax < 0 or total != amount + tax:
            return TierResult.failure(
                SOURCE_PRECISE, f"inconsistent quote (tax={tax}, total={total})"
            )
        return TierResult.success(SOURCE_PRECISE, TaxBreakdown(amount, tax, total, source=SOURCE_PRECISE))

    async def _heuristic(self, amount: int) -> TierResult[TaxBreakdown]:
        tax = flat_rate_tax(amount, self._flat_rate)
        return TierResult.success(
            SOURCE_HEURISTIC, TaxBreakdown.from_parts(amount, tax, source=SOURCE_HEURISTIC)
        )


__all__ = [
    "DEFAULT_FLAT_RATE",
    "TaxEstimator",
    "TaxService",
    "coerce_subtotal",
    "flat_rate_tax",
]
