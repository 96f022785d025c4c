"""Domain entities exposed by the application."""

from .booking import BookingEvent, BookingService
from .notification import Notification, NotificationType
from .tax import Jurisdiction, TaxBreakdown

__all__ = [
    "BookingEvent",
    "BookingService",
    "Jurisdiction",
    "Notification",
    "NotificationType",
    "TaxBreakdown",
]
