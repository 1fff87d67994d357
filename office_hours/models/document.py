"""Document model definitions."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String
from office_hours.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(Base):
    """A schemaless record stored under a collection name."""
    __tablename__ = "documents"

    collection = Column(String, primary_key=True)
    id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)
