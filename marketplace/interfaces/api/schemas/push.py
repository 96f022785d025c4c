"""Bodies of the push delivery endpoint."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PushNotificationRequest(BaseModel):
    """Missing fields are reported by the route with a 400 response."""

    fcm_token: str | None = Field(default=None, alias="fcmToken")
    title: str | None = None
    body: str | None = None
    data: dict[str, Any] | None = None

    model_config = ConfigDict(populate_by_name=True)

    def missing_fields(self) -> list[str]:
        missing = []
        if not self.fcm_token:
            missing.append("fcmToken")
        if not self.title:
            missing.append("title")
        if not self.body:
            missing.append("body")
        return missing


class PushNotificationResponse(BaseModel):
    success: bool
    message_id: str = Field(serialization_alias="messageId")


__all__ = ["PushNotificationRequest", "PushNotificationResponse"]
