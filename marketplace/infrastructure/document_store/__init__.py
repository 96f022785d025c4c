"""Document store contracts and the SQL backed implementation."""

from .base import (
    SERVER_TIMESTAMP,
    CompositeIndex,
    Document,
    DocumentNotFoundError,
    DocumentStore,
    DocumentStoreError,
    MissingIndexError,
    OrderBy,
    Query,
)
from .changes import ChangeFeed, ChangeListener
from .sql import SqlDocumentStore

__all__ = [
    "SERVER_TIMESTAMP",
    "ChangeFeed",
    "ChangeListener",
    "CompositeIndex",
    "Document",
    "DocumentNotFoundError",
    "DocumentStore",
    "DocumentStoreError",
    "MissingIndexError",
    "OrderBy",
    "Query",
    "SqlDocumentStore",
]
