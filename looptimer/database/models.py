"""SQLAlchemy ORM models for LoopTimer."""

from datetime import datetime

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class StoredValue(Base):
    """One entry of the flat key-value store.

    Values are JSON text; the store itself does not interpret them.
    """

    __tablename__ = "kv_store"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<StoredValue key={self.key} size={len(self.value or '')}>"
