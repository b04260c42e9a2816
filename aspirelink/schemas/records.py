"""Rows as returned by every storage adapter."""

from datetime import datetime

from pydantic import BaseModel

from aspirelink.core.roles import Role, SessionStatus


class UserRecord(BaseModel):
    id: str
    email: str | None = None
    full_name: str | None = None
    role: Role | None = None
    mentor_registration_id: int | None = None
    student_registration_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class AdminUserRecord(BaseModel):
    id: int
    email: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class ContactRecord(BaseModel):
    id: int
    name: str
    email: str
    subject: str | None = None
    message: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class MentorRegistrationRecord(BaseModel):
    id: int
    user_id: str | None = None
    full_name: str
    email: str
    linkedin_url: str | None = None
    current_job_title: str | None = None
    company: str | None = None
    years_experience: int | None = None
    education: str | None = None
    skills: list[str] | None = None
    location: str | None = None
    time_zone: str | None = None
    profile_summary: str | None = None
    phone_number: str | None = None
    preferred_disciplines: list[str] | None = None
    mentoring_topics: list[str] | None = None
    availability: list[str] | None = None
    motivation: str | None = None
    agreed_to_commitment: bool | None = False
    consent_to_contact: bool | None = False
    is_active: bool | None = True
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class StudentRegistrationRecord(BaseModel):
    id: int
    user_id: str | None = None
    full_name: str
    email: str
    linkedin_url: str | None = None
    phone_number: str | None = None
    university_name: str | None = None
    academic_program: str | None = None
    year_of_study: str | None = None
    nominated_by: str | None = None
    professor_email: str | None = None
    career_interests: str | None = None
    preferred_disciplines: list[str] | None = None
    mentoring_topics: list[str] | None = None
    mentorship_goals: str | None = None
    agreed_to_commitment: bool | None = False
    consent_to_contact: bool | None = False
    is_active: bool | None = True
    created_at: datetime | None = None

    class Config:
        from_attributes = True


RegistrationRecord = MentorRegistrationRecord | StudentRegistrationRecord


class CohortRecord(BaseModel):
    id: int
    name: str
    description: str | None = None
    start_date: datetime
    end_date: datetime
    sessions_per_month: int | None = 2
    session_duration_minutes: int | None = 30
    is_active: bool | None = True
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class CohortMemberRecord(BaseModel):
    id: int
    cohort_id: int
    user_id: str
    role: Role
    is_active: bool | None = True
    joined_at: datetime | None = None

    class Config:
        from_attributes = True


class AssignmentRecord(BaseModel):
    id: int
    cohort_id: int | None = None
    mentor_id: int
    student_id: int
    mentor_user_id: str | None = None
    student_user_id: str | None = None
    is_active: bool | None = True
    assigned_at: datetime | None = None

    class Config:
        from_attributes = True


class MentoringSessionRecord(BaseModel):
    id: int
    assignment_id: int
    cohort_id: int | None = None
    scheduled_date: datetime
    scheduled_time: str
    duration_minutes: int | None = 30
    status: SessionStatus = SessionStatus.SCHEDULED
    meeting_link: str | None = None
    notes: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
