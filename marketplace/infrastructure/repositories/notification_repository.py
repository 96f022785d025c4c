"""Persistence helpers for notification entities."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any

from marketplace.domain.entities import Notification, NotificationType
from marketplace.infrastructure.document_store import (
    SERVER_TIMESTAMP,
    CompositeIndex,
    Document,
    DocumentNotFoundError,
    DocumentStore,
    DocumentStoreError,
    MissingIndexError,
    OrderBy,
    Query,
)
from marketplace.utils import (
    Tier,
    TierResult,
    ensure_app_timezone,
    first_success,
    timestamp_sort_key,
)

logger = logging.getLogger(__name__)

NOTIFICATIONS_COLLECTION = "notifications"
DEFAULT_FEED_LIMIT = 50

FEED_INDEX = CompositeIndex(
    collection=NOTIFICATIONS_COLLECTION,
    equality_fields=frozenset({"userId"}),
    order_field="createdAt",
    direction="desc",
)


class QueryMode(str, Enum):
    """Shape of the feed query."""

    INDEXED = "indexed"
    UNINDEXED = "unindexed"


class NotificationNotFoundError(LookupError):
    """Raised when a notification does not exist for the caller."""

    def __init__(self, notification_id: str) -> None:
        self.notification_id = notification_id
        super().__init__(f"Notification with id {notification_id} not found")


def feed_query(user_id: str, *, limit: int, mode: QueryMode) -> Query:
    """Return the feed query for ``user_id`` in the requested ``mode``."""

    order_by = OrderBy("createdAt", "desc") if mode is QueryMode.INDEXED else None
    return Query.where(
        NOTIFICATIONS_COLLECTION, {"userId": user_id}, order_by=order_by, limit=limit
    )


def unread_query(user_id: str) -> Query:
    return Query.where(NOTIFICATIONS_COLLECTION, {"userId": user_id, "read": False})


def sort_newest_first(notifications: Iterable[Notification]) -> list[Notification]:
    """Order ``notifications`` by creation time, newest first."""

    return sorted(
        notifications,
        key=lambda notification: timestamp_sort_key(notification.created_at),
        reverse=True,
    )


class NotificationRepository:
    """Create, query and mark :class:`Notification` records."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def create(self, notification: Notification) -> str:
        """Insert ``notification`` as unread and return the assigned id.

        Store errors propagate to the caller.
        """

        return await self.store.add(
            NOTIFICATIONS_COLLECTION, self._to_document_data(notification)
        )

    async def get(self, notification_id: str) -> Notification | None:
        document = await self.store.get(NOTIFICATIONS_COLLECTION, notification_id)
        return to_entity(document) if document is not None else None

    async def list_for_user(
        self, user_id: str, *, limit: int = DEFAULT_FEED_LIMIT
    ) -> Sequence[Notification]:
        """Return up to ``limit`` notifications for ``user_id``, newest first.

        Without the composite index the feed is read unordered and sorted
        here; other read failures yield an empty list.
        """

        async def attempt(mode: QueryMode) -> TierResult[list[Document]]:
            try:
                documents = await self.store.query(feed_query(user_id, limit=limit, mode=mode))
            except MissingIndexError as exc:
                return TierResult.failure(mode.value, str(exc))
            except DocumentStoreError as exc:
                return TierResult.failure(mode.value, str(exc), final=True)
            return TierResult.success(mode.value, documents)

        result = await first_success(
            [
                Tier(QueryMode.INDEXED.value, lambda: attempt(QueryMode.INDEXED)),
                Tier(QueryMode.UNINDEXED.value, lambda: attempt(QueryMode.UNINDEXED)),
            ]
        )
        if not result.ok:
            logger.warning("Unable to read notifications for user %s: %s", user_id, result.reason)
            return []
        return sort_newest_first(to_entity(document) for document in result.value or [])

    async def count_unread(self, user_id: str) -> int:
        """Return how many notifications of ``user_id`` are unread."""

        try:
            return await self.store.count(unread_query(user_id))
        except DocumentStoreError as exc:
            logger.warning("Unable to count unread notifications for user %s: %s", user_id, exc)
            return 0

    async def mark_read(self, notification_id: str, *, user_id: str | None = None) -> bool:
        """Flip ``read`` and stamp ``readAt``.

        Returns ``False`` without writing when the record is already read, so
        ``readAt`` keeps the time of the first transition. The unread check
        and the write happen in one store operation, so concurrent callers
        cannot both report the flip.
        """

        document = await self.store.get(NOTIFICATIONS_COLLECTION, notification_id)
        if document is None:
            raise NotificationNotFoundError(notification_id)
        if user_id is not None and document.data.get("userId") != user_id:
            raise NotificationNotFoundError(notification_id)
        if document.data.get("read") is True:
            return False
        try:
            return await self.store.update_if(
                NOTIFICATIONS_COLLECTION,
                notification_id,
                {"read": True, "readAt": SERVER_TIMESTAMP},
                expected={"read": False},
            )
        except DocumentNotFoundError as exc:
            raise NotificationNotFoundError(notification_id) from exc

    async def mark_many_read(self, notification_ids: Iterable[str], *, user_id: str) -> int:
        """Mark the given notifications of ``user_id`` read; unknown ids are skipped."""

        marked = 0
        for notification_id in dict.fromkeys(notification_ids):
            try:
                if await self.mark_read(notification_id, user_id=user_id):
                    marked += 1
            except NotificationNotFoundError:
                logger.debug("Skipping unknown notification %s", notification_id)
        return marked

    async def mark_all_read(self, user_id: str) -> int:
        """Mark every currently unread notification of ``user_id`` as read.

        The unread set is read once; records created afterwards stay unread.
        Updates run concurrently and the call returns the number flipped.
        """

        documents = await self.store.query(unread_query(user_id))
        if not documents:
            return 0
        results = await asyncio.gather(
            *(self.mark_read(document.id, user_id=user_id) for document in documents)
        )
        return sum(1 for flipped in results if flipped)

    @staticmethod
    def _to_document_data(notification: Notification) -> dict[str, Any]:
        notification_type = notification.type
        if isinstance(notification_type, NotificationType):
            notification_type = notification_type.value
        return {
            "userId": notification.user_id,
            "type": notification_type,
            "title": notification.title,
            "message": notification.message,
            "bookingId": notification.booking_id,
            "data": dict(notification.data or {}),
            "read": False,
            "createdAt": SERVER_TIMESTAMP,
        }


def to_entity(document: Document) -> Notification:
    """Convert a stored document into a :class:`Notification`."""

    data = document.data
    raw_type = data.get("type")
    try:
        notification_type: NotificationType | str = NotificationType(raw_type)
    except ValueError:
        notification_type = str(raw_type)
    return Notification(
        id=document.id,
        user_id=str(data.get("userId") or ""),
        type=notification_type,  # type: ignore[arg-type]
        title=str(data.get("title") or ""),
        message=str(data.get("message") or ""),
        booking_id=data.get("bookingId"),
        data=dict(data.get("data") or {}),
        read=bool(data.get("read", False)),
        created_at=ensure_app_timezone(data.get("createdAt")),
        read_at=ensure_app_timezone(data.get("readAt")),
    )


__all__ = [
    "DEFAULT_FEED_LIMIT",
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
