"""Document store backed by a relational database through SQLAlchemy."""

from __future__ import annotations

import json
import logging
import threading
import uuid
from collections.abc import AsyncIterator, Callable, Iterable, Mapping
from datetime import datetime
from functools import partial
from typing import Any, TypeVar

import anyio
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from marketplace.infrastructure.models import DocumentModel
from marketplace.utils import now_utc, to_utc_isoformat

from .base import (
    SERVER_TIMESTAMP,
    CompositeIndex,
    Document,
    DocumentNotFoundError,
    DocumentStoreError,
    MissingIndexError,
    Query,
    declared_indexes,
)
from .changes import ChangeFeed

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqlDocumentStore:
    """Keep JSON documents in one table and serve live queries in-process.

    Timestamps are only supported on top-level fields. They are stored as
    fixed-width UTC ISO strings so that ordering on them can happen in SQL.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        indexes: Iterable[CompositeIndex] | None = None,
        changes: ChangeFeed | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._indexes = declared_indexes(indexes)
        self._changes = changes or ChangeFeed()
        engine = session_factory.kw.get("bind")
        # SQLite connections do not tolerate interleaved transactions.
        self._lock = (
            threading.Lock()
            if engine is not None and engine.dialect.name == "sqlite"
            else None
        )

    @property
    def changes(self) -> ChangeFeed:
        return self._changes

    def dispose(self) -> None:
        """Release the pooled connections of the underlying engine."""

        engine = self._session_factory.kw.get("bind")
        if engine is not None:
            engine.dispose()

    async def add(self, collection: str, data: Mapping[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        await self._run(self._write_sync, collection, doc_id, data, merge=False, must_exist=False)
        self._changes.publish(collection)
        return doc_id

    async def get(self, collection: str, doc_id: str) -> Document | None:
        return await self._run(self._get_sync, collection, doc_id)

    async def set(
        self,
        collection: str,
        doc_id: str,
        data: Mapping[str, Any],
        *,
        merge: bool = False,
    ) -> None:
        await self._run(self._write_sync, collection, doc_id, data, merge=merge, must_exist=False)
        self._changes.publish(collection)

    async def update(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        await self._run(self._write_sync, collection, doc_id, data, merge=True, must_exist=True)
        self._changes.publish(collection)

    async def update_if(
        self,
        collection: str,
        doc_id: str,
        data: Mapping[str, Any],
        *,
        expected: Mapping[str, Any],
    ) -> bool:
        """Apply ``data`` only while every ``expected`` field still matches.

        The check and the write share one transaction, so of several racing
        callers exactly one sees ``True``.
        """

        changed = await self._run(
            self._write_sync,
            collection,
            doc_id,
            data,
            merge=True,
            must_exist=True,
            expected=expected,
        )
        if changed:
            self._changes.publish(collection)
        return changed

    async def delete(self, collection: str, doc_id: str) -> None:
        await self._run(self._delete_sync, collection, doc_id)
        self._changes.publish(collection)

    async def query(self, query: Query) -> list[Document]:
        self._ensure_index(query)
        return await self._run(self._query_sync, query)

    async def count(self, query: Query) -> int:
        self._ensure_index(query)
        return await self._run(self._count_sync, query)

    async def watch(self, query: Query) -> AsyncIterator[list[Document]]:
        """Yield the result of ``query`` now and again whenever it changes.

        Index problems surface when the first snapshot is requested, which is
        when the watch is established.
        """

        self._ensure_index(query)
        listener = self._changes.listen(query.collection)
        try:
            previous: tuple[tuple[str, str], ...] | None = None
            while True:
                snapshot = await self.query(query)
                fingerprint = _fingerprint(snapshot)
                if fingerprint != previous:
                    previous = fingerprint
                    yield snapshot
                await listener.wait()
        finally:
            self._changes.unlisten(listener)

    def _ensure_index(self, query: Query) -> None:
        required = query.required_index()
        if required is not None and required not in self._indexes:
            raise MissingIndexError(required)

    async def _run(self, func_: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        call = partial(func_, *args, **kwargs)
        if self._lock is not None:
            call = partial(_locked, self._lock, call)
        try:
            return await anyio.to_thread.run_sync(call)
        except DocumentStoreError:
            raise
        except SQLAlchemyError as exc:
            logger.error("Document store operation failed: %s", exc)
            raise DocumentStoreError(str(exc)) from exc

    def _get_sync(self, collection: str, doc_id: str) -> Document | None:
        with self._session_factory() as session:
            model = _find(session, collection, doc_id)
            return _to_document(model) if model is not None else None

    def _write_sync(
        self,
        collection: str,
        doc_id: str,
        data: Mapping[str, Any],
        *,
        merge: bool,
        must_exist: bool,
        expected: Mapping[str, Any] | None = None,
    ) -> bool:
        with self._session_factory() as session, session.begin():
            model = _find(session, collection, doc_id, for_update=expected is not None)
            if model is None:
                if must_exist:
                    raise DocumentNotFoundError(collection, doc_id)
                model = DocumentModel(collection=collection, doc_id=doc_id)
                session.add(model)
                current: dict[str, Any] = {}
                timestamp_fields: set[str] = set()
            elif merge:
                current = dict(model.data or {})
                timestamp_fields = set(model.timestamp_fields or [])
            else:
                current = {}
                timestamp_fields = set()

            if expected is not None and any(
                current.get(key) != value for key, value in expected.items()
            ):
                return False

            now = now_utc()
            for key, value in data.items():
                if value is SERVER_TIMESTAMP:
                    value = now
                if isinstance(value, datetime):
                    current[key] = to_utc_isoformat(value)
                    timestamp_fields.add(key)
                else:
                    current[key] = value
                    timestamp_fields.discard(key)

            model.data = current
            model.timestamp_fields = sorted(timestamp_fields)
            model.updated_at = now
            return True

    def _delete_sync(self, collection: str, doc_id: str) -> None:
        with self._session_factory() as session, session.begin():
            model = _find(session, collection, doc_id)
            if model is not None:
                session.delete(model)

    def _query_sync(self, query: Query) -> list[Document]:
        statement = select(DocumentModel).where(*_where_clauses(query))
        if query.order_by is not None:
            column = DocumentModel.data[query.order_by.field].as_string()
            if query.order_by.direction == "desc":
                statement = statement.order_by(column.desc(), DocumentModel.seq.desc())
            else:
                statement = statement.order_by(column.asc(), DocumentModel.seq.asc())
        else:
            statement = statement.order_by(DocumentModel.seq.asc())
        if query.limit is not None:
            statement = statement.limit(query.limit)
        with self._session_factory() as session:
            return [_to_document(model) for model in session.scalars(statement).all()]

    def _count_sync(self, query: Query) -> int:
        statement = (
            select(func.count()).select_from(DocumentModel).where(*_where_clauses(query))
        )
        with self._session_factory() as session:
            total = session.scalar(statement) or 0
        if query.limit is not None:
            return min(total, query.limit)
        return total


def _locked(lock: threading.Lock, call: Callable[[], T]) -> T:
    with lock:
        return call()


def _find(
    session: Session, collection: str, doc_id: str, *, for_update: bool = False
) -> DocumentModel | None:
    statement = select(DocumentModel).where(
        DocumentModel.collection == collection, DocumentModel.doc_id == doc_id
    )
    if for_update:
        statement = statement.with_for_update()
    return session.scalars(statement).first()


def _where_clauses(query: Query) -> list[Any]:
    clauses: list[Any] = [DocumentModel.collection == query.collection]
    for name, value in query.filters:
        element = DocumentModel.data[name]
        if isinstance(value, bool):
            clauses.append(element.as_boolean() == value)
        elif isinstance(value, int):
            clauses.append(element.as_integer() == value)
        elif isinstance(value, float):
            clauses.append(element.as_float() == value)
        elif isinstance(value, str):
            clauses.append(element.as_string() == value)
        else:
            raise DocumentStoreError(
                f"Unsupported filter value for '{name}': {type(value).__name__}"
            )
    return clauses


def _to_document(model: DocumentModel) -> Document:
    data = dict(model.data or {})
    for name in model.timestamp_fields or []:
        raw = data.get(name)
        if isinstance(raw, str):
            data[name] = datetime.fromisoformat(raw)
    return Document(id=model.doc_id, data=data)


def _fingerprint(snapshot: list[Document]) -> tuple[tuple[str, str], ...]:
    return tuple(
        (document.id, json.dumps(document.data, sort_keys=True, default=str))
        for document in snapshot
    )


__all__ = ["SqlDocumentStore"]
