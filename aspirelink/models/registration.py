"""Mentor and student registration model definitions."""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from aspirelink.database import Base
from aspirelink.models.user import utcnow


class MentorRegistration(Base):
    """Profile submitted through the public mentor form."""
    __tablename__ = "mentor_registrations"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), index=True)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    linkedin_url = Column(String)
    current_job_title = Column(String)
    company = Column(String)
    years_experience = Column(Integer)
    education = Column(String)
    skills = Column(JSON, default=list)
    location = Column(String)
    time_zone = Column(String)
    profile_summary = Column(Text)
    phone_number = Column(String)
    preferred_disciplines = Column(JSON, default=list)
    mentoring_topics = Column(JSON, default=list)
    availability = Column(JSON, default=list)
    motivation = Column(Text)
    agreed_to_commitment = Column(Boolean, default=False)
    consent_to_contact = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class StudentRegistration(Base):
    """Profile submitted through the public student form."""
    __tablename__ = "student_registrations"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), index=True)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    linkedin_url = Column(String)
    phone_number = Column(String)
    university_name = Column(String)
    academic_program = Column(String)
    year_of_study = Column(String)
    nominated_by = Column(String)
    professor_email = Column(String)
    career_interests = Column(Text)
    preferred_disciplines = Column(JSON, default=list)
    mentoring_topics = Column(JSON, default=list)
    mentorship_goals = Column(Text)
    agreed_to_commitment = Column(Boolean, default=False)
    consent_to_contact = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
