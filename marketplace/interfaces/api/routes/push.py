"""Direct push delivery endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from marketplace.application.services import Services
from marketplace.infrastructure.push import PushBackendUnavailableError, PushDeliveryError
from marketplace.interfaces.api.dependencies import get_services
from marketplace.interfaces.api.schemas import PushNotificationRequest, PushNotificationResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["push"])


@router.post("/send-notification", response_model=PushNotificationResponse)
async def send_notification(
    payload: PushNotificationRequest,
    services: Services = Depends(get_services),
) -> PushNotificationResponse:
    """Send one push message to a device token."""

    missing = payload.missing_fields()
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing required fields: {', '.join(missing)}",
        )
    try:
        message_id = await services.push_gateway.send(
            payload.fcm_token or "",
            payload.title or "",
            payload.body or "",
            payload.data or {},
        )
    except PushBackendUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    except PushDeliveryError as exc:
        logger.error("Error sending push notification: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc
    return PushNotificationResponse(success=True, message_id=message_id)
