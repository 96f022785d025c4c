"""Realtime and push notification helpers for the infrastructure layer."""

from .push import PushDeliveryBridge, PushGateway
from .subscriptions import (
    NotificationFeedStream,
    NotificationSubscriptionManager,
    SnapshotStream,
    Subscription,
    UnreadCountStream,
)

__all__ = [
    "NotificationFeedStream",
    "NotificationSubscriptionManager",
    "PushDeliveryBridge",
    "PushGateway",
    "SnapshotStream",
    "Subscription",
    "UnreadCountStream",
]
