"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class NotificationType(str, Enum):
    """Booking events that produce a notification."""

    NEW_BOOKING = "new_booking"
    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_CANCELLED = "booking_cancelled"
    PAYMENT_RECEIVED = "payment_received"
    BOOKING_REMINDER = "booking_reminder"


@dataclass
class Notification:
    """Information message delivered to a specific user.

    ``read`` only ever moves from ``False`` to ``True``; ``read_at`` is stamped
    on that transition and ``created_at`` is assigned by the store.
    """

    id: str | None
    user_id: str
    type: NotificationType
    title: str
    message: str
    booking_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    read: bool = False
    created_at: datetime | None = None
    read_at: datetime | None = None


__all__ = ["Notification", "NotificationType"]
