"""Assembly of the collaborators used by the API layer."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from marketplace.application.use_cases.notifications import BookingNotifier
from marketplace.application.use_cases.payments import (
    PaymentGateway,
    PaymentIntentBuilder,
    TaxEstimator,
    TaxService,
)
from marketplace.config import Settings
from marketplace.infrastructure.database import create_session_factory
from marketplace.infrastructure.document_store import DocumentStore, SqlDocumentStore
from marketplace.infrastructure.notifications import (
    NotificationSubscriptionManager,
    PushDeliveryBridge,
    PushGateway,
)
from marketplace.infrastructure.payments import StripeGateway
from marketplace.infrastructure.push import FirebasePushGateway
from marketplace.infrastructure.repositories import (
    FEED_INDEX,
    DeviceTokenRepository,
    NotificationRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything a request handler may need, built once per application."""

    settings: Settings
    store: DocumentStore
    notifications: NotificationRepository
    device_tokens: DeviceTokenRepository
    subscriptions: NotificationSubscriptionManager
    push_gateway: PushGateway
    push: PushDeliveryBridge
    notifier: BookingNotifier
    tax_estimator: TaxEstimator
    payment_intents: PaymentIntentBuilder


def build_store(settings: Settings) -> SqlDocumentStore:
    """Create the SQL document store described by ``settings``."""

    indexes = [FEED_INDEX] if settings.notification_composite_indexes_enabled else []
    if not indexes:
        logger.warning("Notification feed index disabled; feeds will use the unindexed query")
    return SqlDocumentStore(create_session_factory(settings), indexes=indexes)


def build_services(
    settings: Settings,
    *,
    store: DocumentStore | None = None,
    payment_gateway: PaymentGateway | None = None,
    tax_service: TaxService | None = None,
    push_gateway: PushGateway | None = None,
) -> Services:
    """Wire the services, using injected collaborators where provided."""

    store = store if store is not None else build_store(settings)
    if payment_gateway is None or tax_service is None:
        stripe_gateway = StripeGateway.from_settings(settings)
        payment_gateway = payment_gateway or stripe_gateway
        if tax_service is None and stripe_gateway.configured:
            tax_service = stripe_gateway
    push_gateway = push_gateway or FirebasePushGateway.from_settings(settings)

    notifications = NotificationRepository(store)
    device_tokens = DeviceTokenRepository(store, collections=settings.profile_collections())
    push = PushDeliveryBridge(device_tokens, push_gateway)

    return Services(
        settings=settings,
        store=store,
        notifications=notifications,
        device_tokens=device_tokens,
        subscriptions=NotificationSubscriptionManager(
            store, feed_limit=settings.notification_feed_limit
        ),
        push_gateway=push_gateway,
        push=push,
        notifier=BookingNotifier(notifications, push),
        tax_estimator=TaxEstimator(
            tax_service, flat_rate=str(settings.tax_flat_rate), currency=settings.currency
        ),
        payment_intents=PaymentIntentBuilder(
            payment_gateway, currency=settings.currency, country=settings.tax_country
        ),
    )


__all__ = ["Services", "build_services", "build_store"]
