"""Lookup and registration of push device tokens stored on user profiles."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from marketplace.infrastructure.document_store import SERVER_TIMESTAMP, DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_COLLECTIONS: tuple[str, ...] = ("detailer", "customer")


class DeviceTokenRepository:
    """Read and write the single ``fcmToken`` attribute of a user profile.

    A user profile lives in one of several collections (providers and
    customers); they are searched in order. Only one token per user is kept
    and the latest registration wins.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        collections: Sequence[str] = DEFAULT_PROFILE_COLLECTIONS,
    ) -> None:
        self.store = store
        self.collections = tuple(collections)

    async def register(self, user_id: str, token: str) -> bool:
        """Store ``token`` on the profile of ``user_id``.

        Returns ``False`` when the user has no profile or the input is empty.
        """

        if not user_id or not token:
            return False

        for collection in self.collections:
            profile = await self.store.get(collection, user_id)
            if profile is None:
                continue
            await self.store.update(
                collection,
                user_id,
                {"fcmToken": token, "fcmTokenUpdatedAt": SERVER_TIMESTAMP},
            )
            logger.info("Device token saved to %s profile of user %s", collection, user_id)
            return True

        logger.warning(
            "User %s not found in %s, cannot save device token",
            user_id,
            ", ".join(self.collections),
        )
        return False

    async def lookup(self, user_id: str) -> str | None:
        """Return the current device token of ``user_id`` if one is registered."""

        if not user_id:
            return None
        for collection in self.collections:
            profile = await self.store.get(collection, user_id)
            if profile is None:
                continue
            token = profile.data.get("fcmToken")
            if token:
                return str(token)
        return None


__all__ = ["DEFAULT_PROFILE_COLLECTIONS", "DeviceTokenRepository"]
