"""Principal model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String
from office_hours.database import Base


class PrincipalRecord(Base):
    """Login credentials for one identity; profile data lives in the users collection."""
    __tablename__ = "principals"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
