"""Cohort model definitions."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from aspirelink.database import Base
from aspirelink.models.user import utcnow


class Cohort(Base):
    """A time-boxed mentorship programme."""
    __tablename__ = "cohorts"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    sessions_per_month = Column(Integer, default=2)
    session_duration_minutes = Column(Integer, default=30)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class CohortMember(Base):
    __tablename__ = "cohort_members"

    id = Column(Integer, primary_key=True)
    cohort_id = Column(Integer, nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String, nullable=False)  # student/mentor
    is_active = Column(Boolean, default=True)
    joined_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
