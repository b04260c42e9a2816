"""Mentoring session model definitions."""

from sqlalchemy import Column, DateTime, Integer, String, Text
from aspirelink.database import Base
from aspirelink.models.user import utcnow


class MentoringSession(Base):
    """A meeting scheduled against an assignment."""
    __tablename__ = "mentoring_sessions"

    id = Column(Integer, primary_key=True)
    assignment_id = Column(Integer, nullable=False, index=True)
    cohort_id = Column(Integer, index=True)
    scheduled_date = Column(DateTime, nullable=False)
    scheduled_time = Column(String, nullable=False)
    duration_minutes = Column(Integer, default=30)
    status = Column(String, default="scheduled")
    meeting_link = Column(String)
    notes = Column(Text)
    created_by = Column(String)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow)
