"""Tests for device tokens and best-effort push delivery."""

from __future__ import annotations

import pytest

from conftest import FakePushGateway
from marketplace.infrastructure.notifications import PushDeliveryBridge
from marketplace.infrastructure.push import (
    FirebasePushGateway,
    PushBackendUnavailableError,
)
from marketplace.infrastructure.repositories import DeviceTokenRepository

pytestmark = pytest.mark.anyio


async def test_register_writes_first_matching_profile(store) -> None:
    await store.set("customer", "u1", {"name": "Jane"})
    tokens = DeviceTokenRepository(store)

    assert await tokens.register("u1", "token-a") is True
    assert await tokens.register("u1", "token-b") is True

    profile = await store.get("customer", "u1")
    assert profile.data["fcmToken"] == "token-b"
    assert profile.data["fcmTokenUpdatedAt"] is not None
    assert profile.data["name"] == "Jane"
    assert await tokens.lookup("u1") == "token-b"


async def test_detailer_profile_wins_lookup(store) -> None:
    await store.set("detailer", "u1", {"fcmToken": "provider-device"})
    await store.set("customer", "u1", {"fcmToken": "customer-device"})

    assert await DeviceTokenRepository(store).lookup("u1") == "provider-device"


async def test_register_without_profile_or_token(store) -> None:
    tokens = DeviceTokenRepository(store)

    assert await tokens.register("ghost", "token") is False
    assert await tokens.register("", "token") is False
    assert await tokens.lookup("ghost") is None


async def test_bridge_swallows_gateway_errors(store) -> None:
    await store.set("customer", "u1", {"fcmToken": "t"})
    gateway = FakePushGateway(error=RuntimeError("boom"))

    await PushDeliveryBridge(DeviceTokenRepository(store), gateway).deliver("u1", "T", "B")


async def test_bridge_sends_to_registered_token(store, push_gateway) -> None:
    await store.set("customer", "u1", {"fcmToken": "t"})

    await PushDeliveryBridge(DeviceTokenRepository(store), push_gateway).deliver(
        "u1", "Title", "Body", {"bookingId": "b1"}
    )

    assert push_gateway.sent == [
        {"token": "t", "title": "Title", "body": "Body", "data": {"bookingId": "b1"}}
    ]


async def test_unconfigured_firebase_gateway_is_unavailable() -> None:
    gateway = FirebasePushGateway(None)

    assert gateway.initialized is False
    with pytest.raises(PushBackendUnavailableError):
        await gateway.send("token", "title", "body")
