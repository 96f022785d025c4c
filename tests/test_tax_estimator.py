"""Tests for the tiered tax estimation."""

from __future__ import annotations

import pytest

from conftest import FakeTaxService
from marketplace.application.use_cases.payments import TaxEstimator
from marketplace.application.use_cases.payments.tax import coerce_subtotal, flat_rate_tax
from marketplace.domain.entities import Jurisdiction, TaxBreakdown
from marketplace.infrastructure.payments import PaymentGatewayError, TaxQuote

pytestmark = pytest.mark.anyio

UTAH = Jurisdiction(postal_code="84101", state="UT")


async def test_falls_back_to_flat_rate_when_service_fails() -> None:
    service = FakeTaxService(error=PaymentGatewayError("tax calculation unavailable"))
    estimator = TaxEstimator(service)

    breakdown = await estimator.estimate(10000, UTAH)

    assert (breakdown.subtotal, breakdown.tax, breakdown.total) == (10000, 719, 10719)
    assert breakdown.source == "heuristic"
    assert service.calls, "the precise tier must be attempted first"


async def test_precise_quote_is_returned_verbatim() -> None:
    service = FakeTaxService(TaxQuote(tax=650, total=10650))
    estimator = TaxEstimator(service)

    breakdown = await estimator.estimate(10000, UTAH)

    assert (breakdown.subtotal, breakdown.tax, breakdown.total) == (10000, 650, 10650)
    assert breakdown.source == "precise"


async def test_inconsistent_quote_falls_back() -> None:
    estimator = TaxEstimator(FakeTaxService(TaxQuote(tax=650, total=12000)))

    breakdown = await estimator.estimate(10000, UTAH)

    assert breakdown.tax == 719
    assert breakdown.total == 10719


async def test_skips_service_without_address() -> None:
    service = FakeTaxService(TaxQuote(tax=1, total=10001))
    estimator = TaxEstimator(service)

    breakdown = await estimator.estimate(10000, Jurisdiction(state="UT"))

    assert service.calls == []
    assert breakdown.source == "heuristic"


async def test_missing_service_uses_flat_rate() -> None:
    breakdown = await TaxEstimator(None).estimate(2500, UTAH)

    assert breakdown.tax == 180
    assert breakdown.total == 2680


@pytest.mark.parametrize("subtotal", [None, "abc", -100, float("nan"), True, {"cents": 1}])
async def test_unusable_subtotal_is_treated_as_zero(subtotal) -> None:
    breakdown = await TaxEstimator(FakeTaxService(error=AssertionError())).estimate(subtotal, UTAH)

    assert (breakdown.subtotal, breakdown.tax, breakdown.total) == (0, 0, 0)
    assert breakdown.source == "degenerate"


@pytest.mark.parametrize("subtotal", [0, 1, 99, 1234, 10000, 987654])
async def test_total_is_always_subtotal_plus_tax(subtotal: int) -> None:
    breakdown = await TaxEstimator(None).estimate(subtotal, UTAH)

    assert breakdown.tax >= 0
    assert breakdown.total == breakdown.subtotal + breakdown.tax


def test_coerce_subtotal_accepts_numeric_strings_and_rounds() -> None:
    assert coerce_subtotal("1500") == 1500
    assert coerce_subtotal(12.5) == 13
    assert coerce_subtotal("") is None


def test_flat_rate_rounds_half_up() -> None:
    from decimal import Decimal

    assert flat_rate_tax(50, Decimal("0.01")) == 1
    assert flat_rate_tax(10000, Decimal("0.0719")) == 719


def test_breakdown_rejects_inconsistent_totals() -> None:
    with pytest.raises(ValueError):
        TaxBreakdown(subtotal=100, tax=7, total=100)
