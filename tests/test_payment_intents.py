"""Tests for payment intent creation."""

from __future__ import annotations

import pytest

from conftest import FakePaymentGateway
from marketplace.application.use_cases.payments import (
    InvalidAmountError,
    PaymentIntentBuilder,
    validate_amount,
)
from marketplace.domain.entities import Jurisdiction

pytestmark = pytest.mark.anyio


@pytest.mark.parametrize("amount", [0, -500, float("nan"), float("inf"), None, "abc", 10.5, True])
async def test_rejects_invalid_amounts_without_calling_gateway(amount) -> None:
    gateway = FakePaymentGateway()
    builder = PaymentIntentBuilder(gateway)

    with pytest.raises(InvalidAmountError) as excinfo:
        await builder.create_intent(amount)

    assert str(excinfo.value) == "Invalid amount"
    assert gateway.calls == []


@pytest.mark.parametrize("amount", [1, 999999, "2500", 100.0])
async def test_accepts_positive_whole_amounts(amount) -> None:
    gateway = FakePaymentGateway()

    secret = await PaymentIntentBuilder(gateway).create_intent(amount)

    assert secret == "pi_1_secret_test"
    assert gateway.calls[0]["amount"] == int(float(amount))
    assert gateway.calls[0]["currency"] == "usd"


async def test_each_call_creates_a_new_intent() -> None:
    gateway = FakePaymentGateway()
    builder = PaymentIntentBuilder(gateway)

    first = await builder.create_intent(1000)
    second = await builder.create_intent(1000)

    assert first != second
    assert [call["idempotency_key"] for call in gateway.calls] == [None, None]


async def test_service_location_is_attached() -> None:
    gateway = FakePaymentGateway()
    builder = PaymentIntentBuilder(gateway, country="US")

    await builder.create_intent(
        10719,
        jurisdiction=Jurisdiction(postal_code="84101", state="UT", service_address="1 Main St"),
        metadata={"bookingId": "b1", "attempt": 2},
        idempotency_key="checkout-b1",
    )

    call = gateway.calls[0]
    assert call["metadata"] == {
        "bookingId": "b1",
        "attempt": "2",
        "service_address": "1 Main St",
        "tax_postal_code": "84101",
        "tax_state": "UT",
    }
    assert call["shipping"] == {
        "name": "Service location",
        "address": {
            "country": "US",
            "line1": "1 Main St",
            "postal_code": "84101",
            "state": "UT",
        },
    }
    assert call["idempotency_key"] == "checkout-b1"


async def test_state_only_hint_is_kept_as_metadata() -> None:
    gateway = FakePaymentGateway()

    await PaymentIntentBuilder(gateway).create_intent(500, jurisdiction=Jurisdiction(state="UT"))

    assert gateway.calls[0]["shipping"] is None
    assert gateway.calls[0]["metadata"] == {"tax_state": "UT"}


def test_validate_amount_returns_integer() -> None:
    assert validate_amount("42") == 42


async def test_empty_hint_attaches_nothing() -> None:
    gateway = FakePaymentGateway()

    await PaymentIntentBuilder(gateway).create_intent(500, jurisdiction=Jurisdiction())

    assert gateway.calls[0]["shipping"] is None
    assert gateway.calls[0]["metadata"] == {}
