from datetime import datetime

import pytest
from pydantic import ValidationError

from aspirelink.core.roles import Role, SessionStatus
from aspirelink.schemas.requests import (
    MAX_SESSION_NOTES_LENGTH,
    CohortCreate,
    CohortMemberCreate,
    CohortUpdate,
    MentorRegistrationCreate,
    StudentRegistrationUpdate,
    SessionCreate,
    SessionUpdate,
    normalize_email,
)


def test_normalize_email_strips_and_lowercases() -> None:
    assert normalize_email('  Pat@Example.COM ') == 'pat@example.com'
    assert normalize_email('   ') is None
    assert normalize_email(None) is None


def test_mentor_registration_normalizes_email_and_requires_name() -> None:
    request = MentorRegistrationCreate(full_name=' Maya ', email=' MAYA@EXAMPLE.COM ')

    assert request.full_name == 'Maya'
    assert request.email == 'maya@example.com'
    assert request.skills == []

    with pytest.raises(ValidationError):
        MentorRegistrationCreate(full_name='   ', email='maya@example.com')


def test_cohort_create_rejects_end_before_start() -> None:
    with pytest.raises(ValidationError):
        CohortCreate(name='Backwards', start_date=datetime(2025, 12, 15), end_date=datetime(2025, 9, 1))


def test_cohort_member_must_be_student_or_mentor() -> None:
    assert CohortMemberCreate(user_id='uid-1', role='mentor').role is Role.MENTOR

    with pytest.raises(ValidationError):
        CohortMemberCreate(user_id='uid-1', role='admin')


@pytest.mark.parametrize('scheduled_time', ['3pm', '24:00', '9:5', '15:60'])
def test_session_create_rejects_malformed_time(scheduled_time: str) -> None:
    with pytest.raises(ValidationError):
        SessionCreate(assignment_id=1, scheduled_date=datetime(2025, 9, 10), scheduled_time=scheduled_time)


def test_session_create_trims_notes() -> None:
    request = SessionCreate(
        assignment_id=1,
        scheduled_date=datetime(2025, 9, 10),
        scheduled_time=' 09:30 ',
        notes='   ',
    )

    assert request.scheduled_time == '09:30'
    assert request.notes is None

    with pytest.raises(ValidationError):
        SessionCreate(
            assignment_id=1,
            scheduled_date=datetime(2025, 9, 10),
            scheduled_time='09:30',
            notes='x' * (MAX_SESSION_NOTES_LENGTH + 1),
        )


def test_session_update_only_accepts_known_statuses() -> None:
    assert SessionUpdate(status='completed').status is SessionStatus.COMPLETED

    with pytest.raises(ValidationError):
        SessionUpdate(status='done')


@pytest.mark.parametrize('field', ['scheduled_date', 'scheduled_time', 'duration_minutes', 'status'])
def test_session_update_rejects_null_for_required_fields(field: str) -> None:
    with pytest.raises(ValidationError):
        SessionUpdate(**{field: None})


def test_session_update_allows_clearing_optional_fields() -> None:
    patch = SessionUpdate(notes=None, meeting_link=None)

    assert patch.model_dump(exclude_unset=True) == {'notes': None, 'meeting_link': None}


@pytest.mark.parametrize('field', ['name', 'start_date', 'end_date', 'sessions_per_month', 'is_active'])
def test_cohort_update_rejects_null_for_required_fields(field: str) -> None:
    with pytest.raises(ValidationError):
        CohortUpdate(**{field: None})


def test_cohort_update_checks_dates_sent_together() -> None:
    assert CohortUpdate(description=None).model_dump(exclude_unset=True) == {'description': None}

    with pytest.raises(ValidationError):
        CohortUpdate(start_date=datetime(2025, 12, 15), end_date=datetime(2025, 9, 1))


def test_registration_update_rejects_null_name_and_email() -> None:
    with pytest.raises(ValidationError):
        StudentRegistrationUpdate(full_name=None)
    with pytest.raises(ValidationError):
        StudentRegistrationUpdate(email=None)
