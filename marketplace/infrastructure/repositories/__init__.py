"""Repository implementations for the infrastructure layer."""

from .device_token_repository import DEFAULT_PROFILE_COLLECTIONS, DeviceTokenRepository
from .notification_repository import (
    DEFAULT_FEED_LIMIT,
    FEED_INDEX,
    NOTIFICATIONS_COLLECTION,
    NotificationNotFoundError,
    NotificationRepository,
    QueryMode,
    feed_query,
    sort_newest_first,
    to_entity,
    unread_query,
)

__all__ = [
    "DEFAULT_FEED_LIMIT",
    "DEFAULT_PROFILE_COLLECTIONS",
    "DeviceTokenRepository",
    "FEED_INDEX",
    "NOTIFICATIONS_COLLECTION",
    "NotificationNotFoundError",
    "NotificationRepository",
    "QueryMode",
    "feed_query",
    "sort_newest_first",
    "to_entity",
    "unread_query",
]
