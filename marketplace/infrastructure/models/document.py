"""SQLAlchemy model for documents kept in the document store."""

from sqlalchemy import JSON, Column, DateTime, Integer, String, UniqueConstraint

from marketplace.infrastructure.database import Base
from marketplace.utils import now_utc


class DocumentModel(Base):
    """One document of a collection, stored as a JSON payload."""

    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("collection", "doc_id", name="uq_documents_key"),)

    seq = Column(Integer, primary_key=True, autoincrement=True)
    collection = Column(String(64), nullable=False, index=True)
    doc_id = Column(String(64), nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    timestamp_fields = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)


__all__ = ["DocumentModel"]
