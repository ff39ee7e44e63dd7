"""Database models for the SQL key-value backend."""

from sqlalchemy import Column, String, DateTime, Text
from datetime import datetime, timezone
from database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KVDocument(Base):
    """One JSON document per storage key."""
    __tablename__ = "kv_documents"

    key = Column(String(255), primary_key=True, index=True)
    value = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
