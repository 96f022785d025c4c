"""Utility helpers for reusable functionality."""

from .datetime import (
    ensure_app_timezone,
    get_app_timezone,
    now_utc,
    timestamp_sort_key,
    to_utc_isoformat,
)
from .fallback import Tier, TierResult, first_success

__all__ = [
    "ensure_app_timezone",
    "get_app_timezone",
    "now_utc",
    "timestamp_sort_key",
    "to_utc_isoformat",
    "Tier",
    "TierResult",
    "first_success",
]
