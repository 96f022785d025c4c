"""Shared fixtures for the test-suite."""

from __future__ import annotations

import pathlib
import sys
from collections.abc import Mapping
from typing import Any

import pytest
from sqlalchemy.orm import sessionmaker

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from marketplace.config import Settings
from marketplace.infrastructure.database import build_engine, initialize_database
from marketplace.infrastructure.document_store import SqlDocumentStore
from marketplace.infrastructure.payments import TaxQuote
from marketplace.infrastructure.repositories import FEED_INDEX


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def make_store(*, indexed: bool = True) -> SqlDocumentStore:
    """Return a document store backed by a private in-memory database."""

    engine = build_engine("sqlite://")
    initialize_database(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return SqlDocumentStore(factory, indexes=[FEED_INDEX] if indexed else [])


@pytest.fixture
def store() -> SqlDocumentStore:
    document_store = make_store()
    yield document_store
    document_store.dispose()


@pytest.fixture
def unindexed_store() -> SqlDocumentStore:
    document_store = make_store(indexed=False)
    yield document_store
    document_store.dispose()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        stripe_secret_key=None,
        firebase_service_account=None,
        cors_origins="http://testserver",
    )


class FakePaymentGateway:
    """Records payment intent requests and returns a fixed secret."""

    def __init__(self, *, error: Exception | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self.error = error

    async def create_payment_intent(
        self,
        amount: int,
        *,
        currency: str,
        metadata: Mapping[str, str],
        shipping: Mapping[str, Any] | None = None,
        idempotency_key: str | None = None,
    ) -> str:
        self.calls.append(
            {
                "amount": amount,
                "currency": currency,
                "metadata": dict(metadata),
                "shipping": shipping,
                "idempotency_key": idempotency_key,
            }
        )
        if self.error is not None:
            raise self.error
        return f"pi_{len(self.calls)}_secret_test"


class FakeTaxService:
    """Returns a configured quote or raises the configured error."""

    def __init__(self, quote: TaxQuote | None = None, *, error: Exception | None = None) -> None:
        self.quote = quote
        self.error = error
        self.calls: list[tuple[int, Any]] = []

    async def calculate_tax(self, amount: int, jurisdiction: Any, *, currency: str) -> TaxQuote:
        self.calls.append((amount, jurisdiction))
        if self.error is not None:
            raise self.error
        assert self.quote is not None
        return self.quote


class FakePushGateway:
    """Collects sent messages; optionally fails every send."""

    def __init__(self, *, error: Exception | None = None) -> None:
        self.sent: list[dict[str, Any]] = []
        self.error = error

    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: Mapping[str, Any] | None = None,
    ) -> str:
        if self.error is not None:
            raise self.error
        self.sent.append({"token": token, "title": title, "body": body, "data": dict(data or {})})
        return f"projects/test/messages/{len(self.sent)}"


@pytest.fixture
def payment_gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def push_gateway() -> FakePushGateway:
    return FakePushGateway()
