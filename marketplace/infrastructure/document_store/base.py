"""Contracts shared by document store backends."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol


class DocumentStoreError(Exception):
    """Raised when the store cannot complete an operation."""


class DocumentNotFoundError(DocumentStoreError):
    """Raised when updating a document that does not exist."""

    def __init__(self, collection: str, doc_id: str) -> None:
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"Document '{collection}/{doc_id}' not found")


class MissingIndexError(DocumentStoreError):
    """Raised when a query needs a composite index that is not declared."""

    def __init__(self, index: "CompositeIndex") -> None:
        self.index = index
        super().__init__(
            "The query requires a composite index on "
            f"{index.collection}({', '.join(sorted(index.equality_fields))}, "
            f"{index.order_field} {index.direction})"
        )


class _ServerTimestamp:
    """Sentinel replaced by the store's clock when a write is applied."""

    _instance: "_ServerTimestamp | None" = None

    def __new__(cls) -> "_ServerTimestamp":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()

Direction = Literal["asc", "desc"]


@dataclass(frozen=True)
class OrderBy:
    """Ordering on a timestamp field."""

    field: str
    direction: Direction = "desc"


@dataclass(frozen=True)
class Query:
    """Equality filters, an optional ordering and an optional limit."""

    collection: str
    filters: tuple[tuple[str, Any], ...] = ()
    order_by: OrderBy | None = None
    limit: int | None = None

    @classmethod
    def where(
        cls,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        *,
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> "Query":
        return cls(
            collection=collection,
            filters=tuple((filters or {}).items()),
            order_by=order_by,
            limit=limit,
        )

    @property
    def filter_fields(self) -> frozenset[str]:
        return frozenset(name for name, _ in self.filters)

    def required_index(self) -> "CompositeIndex | None":
        """Return the composite index this query needs, if any."""

        if self.order_by is None or not self.filters:
            return None
        if self.filter_fields == {self.order_by.field}:
            return None
        return CompositeIndex(
            collection=self.collection,
            equality_fields=self.filter_fields,
            order_field=self.order_by.field,
            direction=self.order_by.direction,
        )


@dataclass(frozen=True)
class CompositeIndex:
    """Declared index allowing equality filters combined with an ordering."""

    collection: str
    equality_fields: frozenset[str]
    order_field: str
    direction: Direction = "desc"


@dataclass
class Document:
    """A stored document and its identifier."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)


class DocumentStore(Protocol):
    """Operations the notification and push components rely on."""

    async def add(self, collection: str, data: Mapping[str, Any]) -> str: ...

    async def get(self, collection: str, doc_id: str) -> Document | None: ...

    async def set(
        self,
        collection: str,
        doc_id: str,
        data: Mapping[str, Any],
        *,
        merge: bool = False,
    ) -> None: ...

    async def update(
        self, collection: str, doc_id: str, data: Mapping[str, Any]
    ) -> None: ...

    async def update_if(
        self,
        collection: str,
        doc_id: str,
        data: Mapping[str, Any],
        *,
        expected: Mapping[str, Any],
    ) -> bool: ...

    async def delete(self, collection: str, doc_id: str) -> None: ...

    async def query(self, query: Query) -> list[Document]: ...

    async def count(self, query: Query) -> int: ...

    def watch(self, query: Query) -> AsyncIterator[list[Document]]: ...


def declared_indexes(indexes: Iterable[CompositeIndex] | None) -> frozenset[CompositeIndex]:
    return frozenset(indexes or ())


__all__ = [
    "CompositeIndex",
    "Document",
    "DocumentNotFoundError",
    "DocumentStore",
    "DocumentStoreError",
    "MissingIndexError",
    "OrderBy",
    "Query",
    "SERVER_TIMESTAMP",
    "declared_indexes",
]
