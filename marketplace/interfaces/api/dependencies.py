"""FastAPI dependency utilities."""

from __future__ import annotations

from fastapi import Header, HTTPException, Request, status

from marketplace.application.services import Services


def get_services(request: Request) -> Services:
    """Return the services assembled for the running application."""

    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not ready",
        )
    return services


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Return the caller identity forwarded by the gateway in ``X-User-Id``."""

    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return user_id
