import re
from datetime import datetime, timezone

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from aspirelink.core.roles import MEMBER_ROLES, Role, SessionStatus

MAX_SESSION_NOTES_LENGTH = 2000
MAX_CONTACT_MESSAGE_LENGTH = 5000
SCHEDULED_TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


def normalize_email(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip().lower()
    return normalized or None


def _require_email(value: str) -> str:
    normalized = normalize_email(value)
    if not normalized or '@' not in normalized:
        raise ValueError('A valid email address is required.')
    return normalized


def _require_text(value: str, field_name: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(f'{field_name} is required.')
    return normalized


def _reject_null(value, info: ValidationInfo):
    if value is None:
        raise ValueError(f'{info.field_name} cannot be null.')
    return value


class CheckEmailRequest(BaseModel):
    email: str | None = None


class RegisterIdentityRequest(BaseModel):
    email: str | None = None
    display_name: str | None = None


class SeedAdminRequest(BaseModel):
    email: str | None = None
    secret_key: str


class ContactCreate(BaseModel):
    name: str
    email: str
    subject: str | None = None
    message: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _require_text(value, 'Name')

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _require_email(value)

    @field_validator('message')
    @classmethod
    def validate_message(cls, value: str) -> str:
        normalized = _require_text(value, 'Message')
        if len(normalized) > MAX_CONTACT_MESSAGE_LENGTH:
            raise ValueError(f'Message must be {MAX_CONTACT_MESSAGE_LENGTH} characters or fewer.')
        return normalized


class MentorRegistrationCreate(BaseModel):
    full_name: str
    email: str
    linkedin_url: str | None = None
    current_job_title: str | None = None
    company: str | None = None
    years_experience: int | None = Field(default=None, ge=0)
    education: str | None = None
    skills: list[str] = Field(default_factory=list)
    location: str | None = None
    time_zone: str | None = None
    profile_summary: str | None = None
    phone_number: str | None = None
    preferred_disciplines: list[str] = Field(default_factory=list)
    mentoring_topics: list[str] = Field(default_factory=list)
    availability: list[str] = Field(default_factory=list)
    motivation: str | None = None
    agreed_to_commitment: bool = False
    consent_to_contact: bool = False
    is_active: bool = True

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, value: str) -> str:
        return _require_text(value, 'Full name')

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _require_email(value)


class StudentRegistrationCreate(BaseModel):
    full_name: str
    email: str
    linkedin_url: str | None = None
    phone_number: str | None = None
    university_name: str | None = None
    academic_program: str | None = None
    year_of_study: str | None = None
    nominated_by: str
    professor_email: str
    career_interests: str | None = None
    preferred_disciplines: list[str] = Field(default_factory=list)
    mentoring_topics: list[str] = Field(default_factory=list)
    mentorship_goals: str | None = None
    agreed_to_commitment: bool = False
    consent_to_contact: bool = False
    is_active: bool = True

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, value: str) -> str:
        return _require_text(value, 'Full name')

    @field_validator('nominated_by')
    @classmethod
    def validate_nominated_by(cls, value: str) -> str:
        return _require_text(value, 'Nominated by')

    @field_validator('email', 'professor_email')
    @classmethod
    def validate_emails(cls, value: str) -> str:
        return _require_email(value)


class MentorRegistrationUpdate(BaseModel):
    full_name: str | None = None
    email: str | None = None
    linkedin_url: str | None = None
    current_job_title: str | None = None
    company: str | None = None
    years_experience: int | None = Field(default=None, ge=0)
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
    is_active: bool | None = None

    @field_validator('full_name', 'email', 'is_active')
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        return _reject_null(value, info)

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        return None if value is None else _require_email(value)


class StudentRegistrationUpdate(BaseModel):
    full_name: str | None = None
    email: str | None = None
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
    is_active: bool | None = None

    @field_validator('full_name', 'email', 'is_active')
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        return _reject_null(value, info)

    @field_validator('email', 'professor_email')
    @classmethod
    def validate_emails(cls, value: str | None) -> str | None:
        return None if value is None else _require_email(value)


class StatusUpdate(BaseModel):
    is_active: bool


class RoleUpdate(BaseModel):
    role: Role | None = None


class CohortCreate(BaseModel):
    name: str
    description: str | None = None
    start_date: datetime
    end_date: datetime
    sessions_per_month: int = Field(default=2, ge=1)
    session_duration_minutes: int = Field(default=30, ge=1)
    is_active: bool = True

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _require_text(value, 'Cohort name')

    @model_validator(mode='after')
    def validate_date_range(self) -> 'CohortCreate':
        check_cohort_dates(self.start_date, self.end_date)
        return self


def check_cohort_dates(start_date: datetime, end_date: datetime) -> None:
    if _as_utc(end_date) < _as_utc(start_date):
        raise ValueError('Cohort end date must not be before its start date.')


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class CohortUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    sessions_per_month: int | None = Field(default=None, ge=1)
    session_duration_minutes: int | None = Field(default=None, ge=1)
    is_active: bool | None = None

    @field_validator(
        'name',
        'start_date',
        'end_date',
        'sessions_per_month',
        'session_duration_minutes',
        'is_active',
    )
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        return _reject_null(value, info)

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        return None if value is None else _require_text(value, 'Cohort name')

    @model_validator(mode='after')
    def validate_date_range(self) -> 'CohortUpdate':
        if self.start_date is not None and self.end_date is not None:
            check_cohort_dates(self.start_date, self.end_date)
        return self


class CohortMemberCreate(BaseModel):
    user_id: str
    role: Role

    @field_validator('user_id')
    @classmethod
    def validate_user_id(cls, value: str) -> str:
        return _require_text(value, 'User id')

    @field_validator('role')
    @classmethod
    def validate_role(cls, value: Role) -> Role:
        if value not in MEMBER_ROLES:
            raise ValueError('Cohort members must be students or mentors.')
        return value


class CohortAssignmentCreate(BaseModel):
    mentor_id: int
    student_id: int


class AssignmentCreate(BaseModel):
    mentor_id: int
    student_id: int
    cohort_id: int | None = None


class BulkDeleteRequest(BaseModel):
    assignment_ids: list[int] = Field(default_factory=list)


def _validate_scheduled_time(value: str) -> str:
    normalized = value.strip()
    if not SCHEDULED_TIME_PATTERN.match(normalized):
        raise ValueError('Scheduled time must use 24-hour HH:MM format.')
    return normalized


def _validate_notes(value: str | None) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    if len(normalized) > MAX_SESSION_NOTES_LENGTH:
        raise ValueError(f'Notes must be {MAX_SESSION_NOTES_LENGTH} characters or fewer.')

    return normalized


class SessionCreate(BaseModel):
    assignment_id: int
    cohort_id: int | None = None
    scheduled_date: datetime
    scheduled_time: str
    duration_minutes: int = Field(default=30, ge=1)
    meeting_link: str | None = None
    notes: str | None = None

    @field_validator('scheduled_time')
    @classmethod
    def validate_scheduled_time(cls, value: str) -> str:
        return _validate_scheduled_time(value)

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _validate_notes(value)


class SessionUpdate(BaseModel):
    scheduled_date: datetime | None = None
    scheduled_time: str | None = None
    duration_minutes: int | None = Field(default=None, ge=1)
    status: SessionStatus | None = None
    meeting_link: str | None = None
    notes: str | None = None

    @field_validator('scheduled_date', 'scheduled_time', 'duration_minutes', 'status')
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        return _reject_null(value, info)

    @field_validator('scheduled_time')
    @classmethod
    def validate_scheduled_time(cls, value: str | None) -> str | None:
        return None if value is None else _validate_scheduled_time(value)

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _validate_notes(value)
