"""Device push delivery through Firebase Cloud Messaging."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from functools import partial
from typing import Any

import anyio
import firebase_admin
from firebase_admin import credentials, messaging
from firebase_admin.exceptions import FirebaseError

from marketplace.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "marketplace-push"


class PushBackendUnavailableError(RuntimeError):
    """Raised when no push credentials were configured."""


class PushDeliveryError(RuntimeError):
    """Raised when the push gateway rejects or fails a delivery."""


class FirebasePushGateway:
    """Send notifications to a single registered device token."""

    def __init__(
        self,
        service_account: Mapping[str, Any] | None = None,
        *,
        app_name: str = DEFAULT_APP_NAME,
    ) -> None:
        self._app: firebase_admin.App | None = None
        if not service_account:
            logger.warning("Push backend credentials not configured; push delivery disabled")
            return
        try:
            self._app = firebase_admin.get_app(app_name)
        except ValueError:
            try:
                certificate = credentials.Certificate(dict(service_account))
                self._app = firebase_admin.initialize_app(certificate, name=app_name)
            except (ValueError, OSError) as exc:
                logger.error("Failed to initialize push backend: %s", exc)
                self._app = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirebasePushGateway":
        account = settings.firebase_service_account
        return cls(json.loads(account) if account else None)

    @property
    def initialized(self) -> bool:
        return self._app is not None

    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: Mapping[str, Any] | None = None,
    ) -> str:
        """Deliver one message and return the gateway message id."""

        if self._app is None:
            raise PushBackendUnavailableError(
                "Push backend not initialized. Set FIREBASE_SERVICE_ACCOUNT."
            )
        message = messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            data=_stringify(data or {}),
            token=token,
        )
        try:
            return await anyio.to_thread.run_sync(
                partial(messaging.send, message, app=self._app)
            )
        except (FirebaseError, ValueError) as exc:
            raise PushDeliveryError(str(exc) or "Failed to send notification") from exc


def _stringify(data: Mapping[str, Any]) -> dict[str, str]:
    """FCM data payloads only carry string values."""

    payload: dict[str, str] = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, str):
            payload[str(key)] = value
        else:
            payload[str(key)] = json.dumps(value, default=str)
    return payload


__all__ = [
    "FirebasePushGateway",
    "PushBackendUnavailableError",
    "PushDeliveryError",
]
