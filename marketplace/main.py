"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketplace.application.services import Services, build_services
from marketplace.application.use_cases.payments import PaymentGateway, TaxService
from marketplace.config import Settings, get_settings
from marketplace.infrastructure.document_store import DocumentStore
from marketplace.infrastructure.notifications import PushGateway
from marketplace.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    services: Services | None = None,
    store: DocumentStore | None = None,
    payment_gateway: PaymentGateway | None = None,
    tax_service: TaxService | None = None,
    push_gateway: PushGateway | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Services are assembled on startup unless a ready ``services`` bundle is
    given; individual collaborators replace their production defaults.
    """

    settings = settings or (services.settings if services is not None else get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = services is None
        app.state.services = services or build_services(
            settings,
            store=store,
            payment_gateway=payment_gateway,
            tax_service=tax_service,
            push_gateway=push_gateway,
        )
        logger.info("Marketplace API started")
        try:
            yield
        finally:
            dispose = getattr(app.state.services.store, "dispose", None)
            if owned and store is None and callable(dispose):
                dispose()
            app.state.services = None

    app = FastAPI(title="Marketplace Notifications", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)
    return app


__all__ = ["create_app"]
