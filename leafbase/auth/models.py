"""
Authentication models for Leafbase.

This module defines the SQLAlchemy ``User`` model. Uniqueness of username
and email is enforced by the table's unique indexes.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from leafbase.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    """A registered identity."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(64), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def __repr__(self):
        return f"<User id={self.id} username={self.username!r}>"
