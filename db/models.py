"""
Database models for the Wordle game store.
"""
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()


class StoredValue(Base):
    """One JSON document stored under a versioned key."""
    __tablename__ = 'stored_values'

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<StoredValue(key='{self.key}', size={len(self.value or '')})>"
