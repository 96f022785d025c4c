"""Translate booking events into stored notifications and push messages."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from marketplace.domain.entities import BookingEvent, Notification, NotificationType
from marketplace.infrastructure.notifications import PushDeliveryBridge
from marketplace.infrastructure.repositories import NotificationRepository

logger = logging.getLogger(__name__)


class BookingNotifier:
    """Create the notification for a booking event, then try a device push.

    The stored record is written first and is never undone; a failed push is
    only logged by the bridge.
    """

    def __init__(
        self,
        repository: NotificationRepository,
        push: PushDeliveryBridge | None = None,
    ) -> None:
        self._repository = repository
        self._push = push

    async def notify(
        self, event_type: NotificationType | str, recipient_id: str, booking: BookingEvent
    ) -> str:
        """Dispatch ``booking`` to the notifier matching ``event_type``."""

        handlers = {
            NotificationType.NEW_BOOKING: self.notify_new_booking,
            NotificationType.BOOKING_CONFIRMED: self.notify_booking_confirmed,
            NotificationType.BOOKING_CANCELLED: self.notify_booking_cancelled,
            NotificationType.PAYMENT_RECEIVED: self.notify_payment_received,
            NotificationType.BOOKING_REMINDER: self.notify_booking_reminder,
        }
        return await handlers[NotificationType(event_type)](recipient_id, booking)

    async def notify_new_booking(self, recipient_id: str, booking: BookingEvent) -> str:
        """Tell a provider about a new booking request."""

        return await self._persist_and_push(
            recipient_id,
            booking,
            notification_type=NotificationType.NEW_BOOKING,
            title="New Booking Request",
            message=(
                f"You have a new booking request for {booking.service_summary()} "
                f"on {booking.date} at {booking.time}"
            ),
            data={
                "bookingId": booking.id,
                "customerName": booking.customer_email or "Customer",
                "date": booking.date,
                "time": booking.time,
            },
        )

    async def notify_booking_confirmed(self, recipient_id: str, booking: BookingEvent) -> str:
        return await self._persist_and_push(
            recipient_id,
            booking,
            notification_type=NotificationType.BOOKING_CONFIRMED,
            title="Booking Confirmed",
            message=f"Booking for {booking.date} at {booking.time} has been confirmed",
            data=_schedule_data(booking),
        )

    async def notify_booking_cancelled(self, recipient_id: str, booking: BookingEvent) -> str:
        return await self._persist_and_push(
            recipient_id,
            booking,
            notification_type=NotificationType.BOOKING_CANCELLED,
            title="Booking Cancelled",
            message=f"Booking for {booking.date} at {booking.time} has been cancelled",
            data=_schedule_data(booking),
        )

    async def notify_payment_received(self, recipient_id: str, booking: BookingEvent) -> str:
        amount = booking.amount()
        return await self._persist_and_push(
            recipient_id,
            booking,
            notification_type=NotificationType.PAYMENT_RECEIVED,
            title="Payment Received",
            message=(
                f"Payment of ${_format_amount(amount)} received for booking on {booking.date}"
            ),
            data={"bookingId": booking.id, "amount": amount, "date": booking.date},
        )

    async def notify_booking_reminder(self, recipient_id: str, booking: BookingEvent) -> str:
        return await self._persist_and_push(
            recipient_id,
            booking,
            notification_type=NotificationType.BOOKING_REMINDER,
            title="Booking Reminder",
            message=(
                f"Reminder: You have a booking for {booking.service_summary()} "
                f"tomorrow at {booking.time}"
            ),
            data=_schedule_data(booking),
        )

    async def _persist_and_push(
        self,
        recipient_id: str,
        booking: BookingEvent,
        *,
        notification_type: NotificationType,
        title: str,
        message: str,
        data: Mapping[str, Any],
    ) -> str:
        notification = Notification(
            id=None,
            user_id=recipient_id,
            type=notification_type,
            title=title,
            message=message,
            booking_id=booking.id or None,
            data=dict(data),
        )
        notification_id = await self._repository.create(notification)
        logger.info(
            "Stored %s notification %s for user %s",
            notification_type.value,
            notification_id,
            recipient_id,
        )

        if self._push is not None:
            await self._push.deliver(
                recipient_id,
                title,
                message,
                {
                    "notificationId": notification_id,
                    "type": notification_type.value,
                    "bookingId": booking.id,
                },
            )
        return notification_id


def _schedule_data(booking: BookingEvent) -> dict[str, Any]:
    return {"bookingId": booking.id, "date": booking.date, "time": booking.time}


def _format_amount(amount: float | int) -> str:
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        return str(amount)
    if not value.is_finite():
        return str(amount)
    if value == value.to_integral_value():
        return str(int(value))
    return f"{value:.2f}"


__all__ = ["BookingNotifier"]
