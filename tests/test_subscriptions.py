"""Tests for live notification feeds and unread counters."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import anyio
import pytest

from marketplace.domain.entities import Notification, NotificationType
from marketplace.infrastructure.document_store import DocumentStoreError, Query
from marketplace.infrastructure.notifications import (
    NotificationSubscriptionManager,
    Subscription,
)
from marketplace.infrastructure.repositories import (
    NOTIFICATIONS_COLLECTION,
    NotificationRepository,
    QueryMode,
)

pytestmark = pytest.mark.anyio

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


async def _put(store, doc_id: str, user_id: str, minute: int) -> None:
    await store.set(
        NOTIFICATIONS_COLLECTION,
        doc_id,
        {
            "userId": user_id,
            "type": "new_booking",
            "title": doc_id,
            "message": "m",
            "read": False,
            "createdAt": BASE_TIME + timedelta(minutes=minute),
        },
    )


async def _wait_until(predicate, timeout: float = 3.0) -> None:
    with anyio.fail_after(timeout):
        while not predicate():
            await anyio.sleep(0.01)


class BrokenWatchStore:
    """Store whose live queries fail while being established."""

    async def watch(self, query: Query):
        raise DocumentStoreError("permission denied")
        yield []  # pragma: no cover


async def test_feed_is_sorted_newest_first(store) -> None:
    await _put(store, "older", "u1", 1)
    await _put(store, "newer", "u1", 5)
    stream = NotificationSubscriptionManager(store).feed("u1")
    try:
        snapshot = await stream.__anext__()
    finally:
        await stream.aclose()

    assert stream.mode is QueryMode.INDEXED
    assert [item.id for item in snapshot] == ["newer", "older"]


async def test_missing_index_switches_to_unindexed_mode(unindexed_store) -> None:
    await _put(unindexed_store, "a", "u1", 1)
    await _put(unindexed_store, "b", "u1", 9)
    await _put(unindexed_store, "c", "u1", 4)
    stream = NotificationSubscriptionManager(unindexed_store).feed("u1")
    try:
        first = await stream.__anext__()
        assert stream.mode is QueryMode.UNINDEXED
        assert [item.id for item in first] == ["b", "c", "a"]

        await _put(unindexed_store, "d", "u1", 6)
        second = await stream.__anext__()
        assert stream.mode is QueryMode.UNINDEXED
        assert [item.id for item in second] == ["b", "d", "c", "a"]
    finally:
        await stream.aclose()


async def test_other_errors_yield_one_empty_snapshot_and_end() -> None:
    manager = NotificationSubscriptionManager(BrokenWatchStore())
    stream = manager.feed("u1")

    assert await stream.__anext__() == []
    assert stream.closed
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()

    assert await manager.unread_count("u1").__anext__() == 0


async def test_unread_count_follows_writes(store) -> None:
    repository = NotificationRepository(store)
    stream = NotificationSubscriptionManager(store).unread_count("u1")
    try:
        assert await stream.__anext__() == 0
        notification_id = await repository.create(
            Notification(
                id=None,
                user_id="u1",
                type=NotificationType.NEW_BOOKING,
                title="New Booking Request",
                message="m",
            )
        )
        assert await stream.__anext__() == 1
        await repository.mark_read(notification_id)
        assert await stream.__anext__() == 0
    finally:
        await stream.aclose()


async def test_unsubscribe_stops_callbacks(store) -> None:
    received: list[list[str]] = []
    manager = NotificationSubscriptionManager(store)

    subscription = manager.subscribe_feed(
        "u1", lambda items: received.append([item.id for item in items])
    )
    await _wait_until(lambda: len(received) == 1)
    await _put(store, "first", "u1", 1)
    await _wait_until(lambda: len(received) == 2)

    subscription.unsubscribe()
    await anyio.sleep(0.05)
    await _put(store, "second", "u1", 2)
    await anyio.sleep(0.1)

    assert received == [[], ["first"]]
    assert subscription.active is False
    assert store.changes.listener_count(NOTIFICATIONS_COLLECTION) == 0


async def test_async_callbacks_and_failures_do_not_stop_the_subscription(store) -> None:
    counts: list[int] = []
    calls = 0

    async def on_count(count: int) -> None:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise RuntimeError("subscriber bug")
        counts.append(count)

    subscription = NotificationSubscriptionManager(store).subscribe_unread_count("u1", on_count)
    try:
        await _wait_until(lambda: calls == 1)
        await _put(store, "n1", "u1", 1)
        await _wait_until(lambda: counts == [1])
    finally:
        subscription.unsubscribe()


async def test_empty_user_id_returns_inert_subscription(store) -> None:
    subscription = NotificationSubscriptionManager(store).subscribe_feed("", lambda items: None)

    assert isinstance(subscription, Subscription)
    assert subscription.active is False
    subscription()
