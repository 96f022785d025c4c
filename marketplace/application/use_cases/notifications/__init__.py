"""Public helpers for emitting booking notifications."""

from .events import BookingNotifier

__all__ = ["BookingNotifier"]
