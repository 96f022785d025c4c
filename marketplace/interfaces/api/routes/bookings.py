"""Entry point for booking state changes that should notify a user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from marketplace.application.services import Services
from marketplace.domain.entities import BookingEvent
from marketplace.interfaces.api.dependencies import get_services
from marketplace.interfaces.api.schemas import BookingEventRequest, BookingEventResponse

router = APIRouter(prefix="/booking-events", tags=["bookings"])


@router.post("", response_model=BookingEventResponse, status_code=status.HTTP_201_CREATED)
async def publish_booking_event(
    payload: BookingEventRequest,
    services: Services = Depends(get_services),
) -> BookingEventResponse:
    """Store the notification for a booking event and attempt a push."""

    notification_id = await services.notifier.notify(
        payload.type, payload.recipient_id, BookingEvent.from_mapping(payload.booking)
    )
    return BookingEventResponse(notification_id=notification_id)
