"""Aggregate application use cases."""

from .notifications import BookingNotifier
from .payments import PaymentIntentBuilder, TaxEstimator

__all__ = ["BookingNotifier", "PaymentIntentBuilder", "TaxEstimator"]
