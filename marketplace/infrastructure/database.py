"""Database configuration and session management."""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


def build_engine(database_url: str) -> Engine:
    """Create an engine suitable for use from worker threads."""

    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if database_url in {"sqlite://", "sqlite:///:memory:"}:
            # A single shared connection keeps the in-memory database alive.
            return create_engine(
                database_url, connect_args=connect_args, poolclass=StaticPool
            )
        return create_engine(database_url, connect_args=connect_args)
    return create_engine(database_url, pool_pre_ping=True)


def initialize_database(engine: Engine) -> None:
    """Ensure all ORM models have corresponding database tables."""

    from marketplace.infrastructure import models  # noqa: F401  # ensure models are imported

    Base.metadata.create_all(bind=engine, checkfirst=True)


def create_session_factory(settings: Settings) -> sessionmaker:
    """Build the engine for ``settings`` and return a bound session factory."""

    engine = build_engine(settings.database_url)
    initialize_database(engine)
    logger.info("Document store database ready (%s)", engine.url.get_backend_name())
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


__all__ = ["Base", "build_engine", "create_session_factory", "initialize_database"]
