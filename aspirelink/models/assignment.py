"""Mentor-student assignment model definitions."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from aspirelink.database import Base
from aspirelink.models.user import utcnow


class Assignment(Base):
    """Pairs one mentor registration with one student registration."""
    __tablename__ = "mentor_student_assignments"

    id = Column(Integer, primary_key=True)
    cohort_id = Column(Integer, index=True)
    mentor_id = Column(Integer, nullable=False, index=True)
    student_id = Column(Integer, nullable=False, index=True)
    mentor_user_id = Column(String, index=True)
    student_user_id = Column(String, index=True)
    is_active = Column(Boolean, default=True)
    assigned_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
