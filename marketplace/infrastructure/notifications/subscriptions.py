"""Live notification feeds with automatic degradation of the feed query.

A feed starts with the indexed query (filter by user, newest first, limited).
When the store reports that the composite index is missing while the watch
is being established, the feed switches to the unindexed query for the rest
of its life. Every snapshot is sorted newest first before it is handed out,
whatever the mode.

Any other store error produces one empty snapshot and ends the stream, so an
empty result means "possibly stale". Subscribing again starts a new stream.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Generic, TypeVar

from marketplace.domain.entities import Notification
from marketplace.infrastructure.document_store import (
    Document,
    DocumentStore,
    DocumentStoreError,
    MissingIndexError,
    Query,
)
from marketplace.infrastructure.repositories import (
    DEFAULT_FEED_LIMIT,
    QueryMode,
    feed_query,
    sort_newest_first,
    to_entity,
    unread_query,
)
from marketplace.utils import Tier, TierResult, first_success

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SnapshotStream(Generic[T]):
    """Async iterator over the snapshots of one live query."""

    def __init__(self, store: DocumentStore, *, label: str) -> None:
        self._store = store
        self._label = label
        self._watch: AsyncIterator[list[Document]] | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "SnapshotStream[T]":
        return self

    async def __anext__(self) -> T:
        if self._closed:
            raise StopAsyncIteration
        if self._watch is None:
            return await self._establish()
        try:
            documents = await self._watch.__anext__()
        except StopAsyncIteration:
            await self.aclose()
            raise
        except DocumentStoreError as exc:
            logger.warning("Live query %s failed: %s", self._label, exc)
            await self.aclose()
            return self._empty()
        return self._present(documents)

    async def aclose(self) -> None:
        """Detach from the store; no further snapshots are produced."""

        self._closed = True
        watch, self._watch = self._watch, None
        if watch is not None:
            await _close_watch(watch)

    def _tiers(self) -> list[tuple[str, Query]]:
        raise NotImplementedError

    def _present(self, documents: list[Document]) -> T:
        raise NotImplementedError

    def _empty(self) -> T:
        raise NotImplementedError

    def _on_tier_selected(self, name: str) -> None:
        """Hook called with the tier whose watch was established."""

    async def _establish(self) -> T:
        async def attempt(name: str, query: Query) -> TierResult[list[Document]]:
            watch = self._store.watch(query)
            try:
                documents = await watch.__anext__()
            except MissingIndexError as exc:
                await _close_watch(watch)
                return TierResult.failure(name, str(exc))
            except (DocumentStoreError, StopAsyncIteration) as exc:
                await _close_watch(watch)
                return TierResult.failure(name, str(exc) or type(exc).__name__, final=True)
            self._watch = watch
            self._on_tier_selected(name)
            return TierResult.success(name, documents)

        tiers = [
            Tier(name, lambda name=name, query=query: attempt(name, query))
            for name, query in self._tiers()
        ]
        result = await first_success(tiers)
        if not result.ok:
            logger.warning("Live query %s could not be established: %s", self._label, result.reason)
            await self.aclose()
            return self._empty()
        return self._present(result.value or [])


class NotificationFeedStream(SnapshotStream[list[Notification]]):
    """Snapshots of a user's most recent notifications, newest first."""

    def __init__(self, store: DocumentStore, user_id: str, *, limit: int) -> None:
        super().__init__(store, label=f"notifications of {user_id}")
        self.user_id = user_id
        self.limit = limit
        self.mode = QueryMode.INDEXED

    def _tiers(self) -> list[tuple[str, Query]]:
        modes = [QueryMode.INDEXED, QueryMode.UNINDEXED]
        if self.mode is QueryMode.UNINDEXED:
            modes = [QueryMode.UNINDEXED]
        return [
            (mode.value, feed_query(self.user_id, limit=self.limit, mode=mode))
            for mode in modes
        ]

    def _on_tier_selected(self, name: str) -> None:
        mode = QueryMode(name)
        if mode is QueryMode.UNINDEXED and self.mode is QueryMode.INDEXED:
            logger.warning(
                "Composite index missing for %s; falling back to unindexed feed", self._label
            )
        self.mode = mode

    def _present(self, documents: list[Document]) -> list[Notification]:
        return sort_newest_first(to_entity(document) for document in documents)

    def _empty(self) -> list[Notification]:
        return []


class UnreadCountStream(SnapshotStream[int]):
    """Snapshots of how many notifications of a user are unread."""

    def __init__(self, store: DocumentStore, user_id: str) -> None:
        super().__init__(store, label=f"unread count of {user_id}")
        self.user_id = user_id

    def _tiers(self) -> list[tuple[str, Query]]:
        return [("unread", unread_query(self.user_id))]

    def _present(self, documents: list[Document]) -> int:
        return len(documents)

    def _empty(self) -> int:
        return 0


SnapshotCallback = Callable[[T], Awaitable[None] | None]


class Subscription:
    """Handle returned by the callback style subscribe helpers."""

    def __init__(self, task: asyncio.Task[None] | None = None) -> None:
        self._task = task

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def unsubscribe(self) -> None:
        """Detach the listener; the callback is not invoked afterwards."""

        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    __call__ = unsubscribe


class NotificationSubscriptionManager:
    """Open live feeds and unread counters for users.

    Subscriptions are independent of each other, also for the same user.
    """

    def __init__(self, store: DocumentStore, *, feed_limit: int = DEFAULT_FEED_LIMIT) -> None:
        self._store = store
        self._feed_limit = feed_limit

    def feed(self, user_id: str, *, limit: int | None = None) -> NotificationFeedStream:
        if not user_id:
            raise ValueError("user_id is required")
        return NotificationFeedStream(self._store, user_id, limit=limit or self._feed_limit)

    def unread_count(self, user_id: str) -> UnreadCountStream:
        if not user_id:
            raise ValueError("user_id is required")
        return UnreadCountStream(self._store, user_id)

    def subscribe_feed(
        self,
        user_id: str,
        callback: SnapshotCallback[list[Notification]],
        *,
        limit: int | None = None,
    ) -> Subscription:
        """Invoke ``callback`` with every feed snapshot until unsubscribed."""

        if not user_id:
            return Subscription()
        return self._spawn(self.feed(user_id, limit=limit), callback)

    def subscribe_unread_count(
        self, user_id: str, callback: SnapshotCallback[int]
    ) -> Subscription:
        """Invoke ``callback`` with every unread count until unsubscribed."""

        if not user_id:
            return Subscription()
        return self._spawn(self.unread_count(user_id), callback)

    @staticmethod
    def _spawn(stream: SnapshotStream[Any], callback: SnapshotCallback[Any]) -> Subscription:
        async def consume() -> None:
            try:
                async for snapshot in stream:
                    try:
                        result = callback(snapshot)
                        if inspect.isawaitable(result):
                            await result
                    except Exception:
                        logger.exception("Notification subscriber callback failed")
            finally:
                await stream.aclose()

        loop = asyncio.get_running_loop()
        return Subscription(loop.create_task(consume()))


async def _close_watch(watch: AsyncIterator[Any]) -> None:
    aclose = getattr(watch, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except RuntimeError:  # pragma: no cover - generator still running elsewhere
        logger.debug("Live query watch was still running while closing")


__all__ = [
    "NotificationFeedStream",
    "NotificationSubscriptionManager",
    "SnapshotStream",
    "Subscription",
    "UnreadCountStream",
]
