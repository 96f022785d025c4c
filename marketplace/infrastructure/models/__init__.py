"""ORM models used by the infrastructure layer."""

from .document import DocumentModel

__all__ = ["DocumentModel"]
