"""In-process change signals for live queries."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import DefaultDict, Set


class ChangeListener:
    """Wakes up a watcher whenever its collection is written to."""

    def __init__(self, collection: str) -> None:
        self.collection = collection
        self._changed = asyncio.Event()

    def notify(self) -> None:
        self._changed.set()

    async def wait(self) -> None:
        """Block until a change arrived since the previous call."""

        await self._changed.wait()
        self._changed.clear()


class ChangeFeed:
    """Manage active listeners grouped by collection."""

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, Set[ChangeListener]] = defaultdict(set)

    def listen(self, collection: str) -> ChangeListener:
        """Register and return a listener for ``collection``."""

        listener = ChangeListener(collection)
        self._listeners[collection].add(listener)
        return listener

    def unlisten(self, listener: ChangeListener) -> None:
        """Remove ``listener`` from the pool of its collection."""

        listeners = self._listeners.get(listener.collection)
        if listeners is None:
            return
        listeners.discard(listener)
        if not listeners:
            self._listeners.pop(listener.collection, None)

    def publish(self, collection: str) -> None:
        """Signal every listener of ``collection`` that data changed."""

        for listener in list(self._listeners.get(collection, set())):
            listener.notify()

    def listener_count(self, collection: str) -> int:
        return len(self._listeners.get(collection, set()))


__all__ = ["ChangeFeed", "ChangeListener"]
