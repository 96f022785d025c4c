from .booking_event import BookingEventRequest, BookingEventResponse
from .notification import (
    DeviceTokenResponse,
    DeviceTokenUpdate,
    MarkAllReadResponse,
    MarkReadResponse,
    NotificationMarkReadRequest,
    NotificationRead,
    UnreadCountRead,
)
from .payment import (
    PaymentIntentRequest,
    PaymentIntentResponse,
    TaxCalculationRequest,
    TaxCalculationResponse,
)
from .push import PushNotificationRequest, PushNotificationResponse

__all__ = [
    "BookingEventRequest",
    "BookingEventResponse",
    "DeviceTokenResponse",
    "DeviceTokenUpdate",
    "MarkAllReadResponse",
    "MarkReadResponse",
    "NotificationMarkReadRequest",
    "NotificationRead",
    "PaymentIntentRequest",
    "PaymentIntentResponse",
    "PushNotificationRequest",
    "PushNotificationResponse",
    "TaxCalculationRequest",
    "TaxCalculationResponse",
    "UnreadCountRead",
]
