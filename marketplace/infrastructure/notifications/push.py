"""Best-effort push delivery layered on top of the in-app notification record."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from marketplace.infrastructure.repositories import DeviceTokenRepository

logger = logging.getLogger(__name__)


class PushGateway(Protocol):
    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: Mapping[str, Any] | None = None,
    ) -> str: ...


class PushDeliveryBridge:
    """Resolve a user's device token and hand the message to the gateway.

    Failures are logged and never raised: the stored notification is the
    record of truth.
    """

    def __init__(self, tokens: DeviceTokenRepository, gateway: PushGateway) -> None:
        self._tokens = tokens
        self._gateway = gateway

    async def deliver(
        self,
        user_id: str,
        title: str,
        body: str,
        data: Mapping[str, Any] | None = None,
    ) -> None:
        try:
            token = await self._tokens.lookup(user_id)
            if not token:
                logger.warning("No device token found for user %s", user_id)
                return
            message_id = await self._gateway.send(token, title, body, dict(data or {}))
        except Exception as exc:
            logger.warning("Push notification to user %s failed: %s", user_id, exc)
            return
        logger.info("Push notification %s delivered to user %s", message_id, user_id)


__all__ = ["PushDeliveryBridge", "PushGateway"]
