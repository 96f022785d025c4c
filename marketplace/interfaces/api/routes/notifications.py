"""Endpoints and websocket handler for in-app notifications."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from marketplace.application.services import Services
from marketplace.domain.entities import Notification, NotificationType
from marketplace.infrastructure.document_store import DocumentStoreError
from marketplace.infrastructure.repositories import NotificationNotFoundError
from marketplace.interfaces.api.dependencies import get_current_user_id, get_services
from marketplace.interfaces.api.schemas import (
    DeviceTokenResponse,
    DeviceTokenUpdate,
    MarkAllReadResponse,
    MarkReadResponse,
    NotificationMarkReadRequest,
    NotificationRead,
    UnreadCountRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _type_value(notification: Notification) -> str:
    if isinstance(notification.type, NotificationType):
        return notification.type.value
    return str(notification.type)


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or "",
        user_id=notification.user_id,
        type=_type_value(notification),
        title=notification.title,
        message=notification.message,
        booking_id=notification.booking_id,
        data=notification.data or {},
        read=notification.read,
        created_at=notification.created_at,
        read_at=notification.read_at,
    )


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return _notification_to_schema(notification).model_dump(mode="json", by_alias=True)


@router.get("", response_model=list[NotificationRead])
async def list_notifications(
    limit: int | None = Query(default=None, gt=0, le=200),
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> list[NotificationRead]:
    """Return the most recent notifications for the caller, newest first."""

    notifications = await services.notifications.list_for_user(
        user_id, limit=limit or services.settings.notification_feed_limit
    )
    return [_notification_to_schema(notification) for notification in notifications]


@router.get("/unread-count", response_model=UnreadCountRead)
async def unread_count(
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> UnreadCountRead:
    return UnreadCountRead(count=await services.notifications.count_unread(user_id))


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> MarkAllReadResponse:
    """Mark every unread notification of the caller as read."""

    marked = await services.notifications.mark_all_read(user_id)
    return MarkAllReadResponse(marked=marked)


@router.post("/{notification_id}/read", response_model=MarkReadResponse)
async def mark_read(
    notification_id: str,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> MarkReadResponse:
    """Mark one notification as read; repeating the call changes nothing."""

    try:
        changed = await services.notifications.mark_read(notification_id, user_id=user_id)
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return MarkReadResponse(id=notification_id, changed=changed)


@router.put("/device-token", response_model=DeviceTokenResponse)
async def register_device_token(
    payload: DeviceTokenUpdate,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> DeviceTokenResponse:
    """Store the caller's push token; the latest registration wins."""

    registered = await services.device_tokens.register(user_id, payload.token)
    if not registered:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User profile not found",
        )
    return DeviceTokenResponse(registered=True)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams the caller's feed and unread count."""

    user_id = (websocket.query_params.get("user_id") or "").strip()
    services: Services | None = getattr(websocket.app.state, "services", None)
    if not user_id or services is None:
        await websocket.close(code=1008)
        return

    await websocket.accept()
    send_lock = asyncio.Lock()

    async def send(message: dict[str, Any]) -> None:
        async with send_lock:
            await websocket.send_json(message)

    async def on_feed(notifications: list[Notification]) -> None:
        await send(
            {
                "type": "notifications",
                "data": [serialize_notification(item) for item in notifications],
            }
        )

    async def on_unread_count(count: int) -> None:
        await send({"type": "unread-count", "data": count})

    feed = services.subscriptions.subscribe_feed(user_id, on_feed)
    unread = services.subscriptions.subscribe_unread_count(user_id, on_unread_count)
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await send({"type": "pong"})
                continue

            if message_type == "ack":
                try:
                    ack = NotificationMarkReadRequest.model_validate(message)
                except ValidationError:
                    continue
                try:
                    await services.notifications.mark_many_read(ack.unique_ids(), user_id=user_id)
                except DocumentStoreError as exc:
                    logger.warning(
                        "Unable to acknowledge notifications for user %s: %s", user_id, exc
                    )
    except WebSocketDisconnect:
        logger.debug("Notification websocket closed for user %s", user_id)
    finally:
        feed.unsubscribe()
        unread.unsubscribe()
