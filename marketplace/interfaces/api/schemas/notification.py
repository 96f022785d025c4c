"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark a batch of notifications as read."""

    ids: list[str] = Field(..., min_length=1, description="Notification identifiers")

    def unique_ids(self) -> list[str]:
        """Return the list of identifiers without duplicates preserving order."""

        return list(dict.fromkeys(self.ids))


class NotificationRead(_CamelModel):
    """Representation of a notification delivered to the client."""

    id: str
    user_id: str
    type: str
    title: str
    message: str
    booking_id: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    read: bool = False
    created_at: datetime | None = None
    read_at: datetime | None = None


class UnreadCountRead(BaseModel):
    count: int


class MarkReadResponse(BaseModel):
    id: str
    changed: bool


class MarkAllReadResponse(BaseModel):
    marked: int


class DeviceTokenUpdate(BaseModel):
    token: str = Field(..., min_length=1)


class DeviceTokenResponse(BaseModel):
    registered: bool


__all__ = [
    "DeviceTokenResponse",
    "DeviceTokenUpdate",
    "MarkAllReadResponse",
    "MarkReadResponse",
    "NotificationMarkReadRequest",
    "NotificationRead",
    "UnreadCountRead",
]
