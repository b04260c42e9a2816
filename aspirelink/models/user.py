"""User and admin allow-list model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String
from aspirelink.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """An identity keyed by the auth provider's uid."""
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, index=True)
    full_name = Column(String)
    role = Column(String)  # student/mentor/admin, NULL until linked
    mentor_registration_id = Column(Integer)
    student_registration_id = Column(Integer)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class AdminUser(Base):
    """Email allow-list for the admin role."""
    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True)
    email = Column(String, unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
