"""Bodies of the booking event endpoint."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from marketplace.domain.entities import NotificationType


class BookingEventRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: NotificationType
    recipient_id: str = Field(..., min_length=1)
    booking: dict[str, Any]


class BookingEventResponse(BaseModel):
    notification_id: str = Field(serialization_alias="notificationId")


__all__ = ["BookingEventRequest", "BookingEventResponse"]
