from datetime import datetime

import pytest

from aspirelink.core.errors import NotFoundError
from aspirelink.core.roles import Role, SessionStatus
from aspirelink.schemas.requests import SessionCreate, SessionUpdate
from aspirelink.schemas.responses import UNKNOWN_COHORT, UNKNOWN_MENTOR, UNKNOWN_STUDENT
from aspirelink.services import relationships, session_ledger
from aspirelink.services.admin_stats import compute_admin_stats


def seed_pair(storage, mentor_uid: str | None = 'mentor-uid', student_uid: str | None = 'student-uid'):
    mentor = storage.create_mentor_registration(
        {'full_name': 'Maya Mentor', 'email': 'maya@example.com', 'user_id': mentor_uid}
    )
    student = storage.create_student_registration(
        {'full_name': 'Sam Student', 'email': 'sam@example.com', 'user_id': student_uid}
    )
    cohort = storage.create_cohort(
        {'name': 'Fall 2025', 'start_date': datetime(2025, 9, 1), 'end_date': datetime(2025, 12, 15)}
    )
    return mentor, student, cohort


def test_create_assignment_copies_linked_user_ids(storage) -> None:
    mentor, student, cohort = seed_pair(storage, student_uid=None)

    assignment = relationships.create_assignment(storage, mentor.id, student.id, cohort.id)

    assert assignment.cohort_id == cohort.id
    assert assignment.mentor_user_id == 'mentor-uid'
    assert assignment.student_user_id is None


def test_create_assignment_requires_both_registrations_and_cohort(storage) -> None:
    mentor, student, _ = seed_pair(storage)

    with pytest.raises(NotFoundError) as exception_info:
        relationships.create_assignment(storage, mentor.id, 999)
    assert str(exception_info.value) == 'Mentor or student not found.'

    with pytest.raises(NotFoundError) as exception_info:
        relationships.create_assignment(storage, mentor.id, student.id, cohort_id=999)
    assert str(exception_info.value) == 'Cohort not found.'


def test_assignments_for_mentor_include_counterpart_cohort_and_sessions(storage) -> None:
    mentor, student, cohort = seed_pair(storage)
    assignment = relationships.create_assignment(storage, mentor.id, student.id, cohort.id)
    session_ledger.create_session(
        storage,
        SessionCreate(assignment_id=assignment.id, scheduled_date=datetime(2025, 9, 10), scheduled_time='14:00'),
        created_by='mentor-uid',
    )

    [enriched] = relationships.list_assignments_for_user(storage, 'mentor-uid', Role.MENTOR)

    assert enriched.id == assignment.id
    assert enriched.counterpart.id == student.id
    assert enriched.counterpart_name == 'Sam Student'
    assert enriched.cohort.name == 'Fall 2025'
    assert [session.cohort_id for session in enriched.sessions] == [cohort.id]


def test_assignments_found_through_registration_linked_later(storage) -> None:
    mentor, student, _ = seed_pair(storage, student_uid=None)
    assignment = relationships.create_assignment(storage, mentor.id, student.id)
    storage.update_student_registration(student.id, {'user_id': 'late-uid'})

    [enriched] = relationships.list_assignments_for_user(storage, 'late-uid', Role.STUDENT)

    assert enriched.id == assignment.id
    assert enriched.counterpart_name == 'Maya Mentor'
    assert enriched.cohort is None


def test_assignment_matched_both_ways_is_listed_once(storage) -> None:
    mentor, student, _ = seed_pair(storage)
    relationships.create_assignment(storage, mentor.id, student.id)

    assert len(relationships.list_assignments_for_user(storage, 'student-uid', Role.STUDENT)) == 1


def test_enrichment_degrades_when_references_dangle(storage) -> None:
    mentor, student, cohort = seed_pair(storage)
    relationships.create_assignment(storage, mentor.id, student.id, cohort.id)
    storage.delete_student_registration(student.id)
    storage.delete_cohort(cohort.id)

    [enriched] = relationships.list_assignments_for_user(storage, 'mentor-uid', Role.MENTOR)

    assert enriched.counterpart is None
    assert enriched.counterpart_name == UNKNOWN_STUDENT
    assert enriched.cohort is None


def test_admin_view_uses_placeholders_after_deletes(storage) -> None:
    mentor, student, cohort = seed_pair(storage)
    relationships.create_assignment(storage, mentor.id, student.id, cohort.id)
    storage.delete_mentor_registration(mentor.id)
    storage.delete_cohort(cohort.id)

    [named] = relationships.list_all_assignments(storage)

    assert named.mentor_name == UNKNOWN_MENTOR
    assert named.student_name == 'Sam Student'
    assert named.cohort_name == UNKNOWN_COHORT


def test_admin_view_leaves_cohortless_assignment_unnamed(storage) -> None:
    mentor, student, _ = seed_pair(storage)
    relationships.create_assignment(storage, mentor.id, student.id)

    [named] = relationships.list_all_assignments(storage)

    assert named.cohort_name is None


def test_cohort_assignments_survive_cohort_deletion(storage) -> None:
    mentor, student, cohort = seed_pair(storage)
    relationships.create_assignment(storage, mentor.id, student.id, cohort.id)
    storage.delete_cohort(cohort.id)

    [named] = relationships.list_cohort_assignments(storage, cohort.id)

    assert named.mentor_name == 'Maya Mentor'
    assert named.cohort_name is None


def test_cohorts_for_user_skip_missing_cohorts(storage) -> None:
    storage.upsert_user('student-uid', {'email': 'sam@example.com'})
    _, _, fall = seed_pair(storage)
    spring = storage.create_cohort(
        {'name': 'Spring 2026', 'start_date': datetime(2026, 1, 10), 'end_date': datetime(2026, 5, 1)}
    )
    for cohort_id in (fall.id, spring.id):
        storage.add_cohort_member({'cohort_id': cohort_id, 'user_id': 'student-uid', 'role': Role.STUDENT})
    storage.delete_cohort(spring.id)

    cohorts = relationships.list_cohorts_for_user(storage, 'student-uid')

    assert [cohort.name for cohort in cohorts] == ['Fall 2025']


def test_cohort_members_carry_user_and_registration(storage) -> None:
    storage.upsert_user('mentor-uid', {'email': 'maya@example.com', 'full_name': 'Maya'})
    mentor, _, cohort = seed_pair(storage)
    storage.add_cohort_member({'cohort_id': cohort.id, 'user_id': 'mentor-uid', 'role': Role.MENTOR})

    [member] = relationships.list_cohort_members(storage, cohort.id)

    assert member.user.full_name == 'Maya'
    assert member.registration.id == mentor.id


def test_session_ledger_forces_scheduled_and_merges_updates(storage) -> None:
    mentor, student, cohort = seed_pair(storage)
    assignment = relationships.create_assignment(storage, mentor.id, student.id, cohort.id)
    session = session_ledger.create_session(
        storage,
        SessionCreate(
            assignment_id=assignment.id,
            scheduled_date=datetime(2025, 9, 10),
            scheduled_time='14:00',
            notes='Kickoff',
        ),
        created_by='mentor-uid',
    )

    assert session.status is SessionStatus.SCHEDULED
    assert session.cohort_id == cohort.id
    assert session.created_by == 'mentor-uid'

    completed = session_ledger.update_session(storage, session.id, SessionUpdate(status=SessionStatus.COMPLETED))
    assert completed.status is SessionStatus.COMPLETED
    assert completed.notes == 'Kickoff'

    # No transition rules: a completed session can be rescheduled.
    moved = session_ledger.update_session(
        storage,
        session.id,
        SessionUpdate(status=SessionStatus.RESCHEDULED, scheduled_time='16:30'),
    )
    assert moved.status is SessionStatus.RESCHEDULED
    assert moved.scheduled_time == '16:30'

    session_ledger.delete_session(storage, session.id)
    assert session_ledger.list_sessions_for_assignment(storage, assignment.id) == []


def test_session_ledger_reports_missing_rows(storage) -> None:
    with pytest.raises(NotFoundError):
        session_ledger.create_session(
            storage,
            SessionCreate(assignment_id=42, scheduled_date=datetime(2025, 9, 10), scheduled_time='14:00'),
            created_by='mentor-uid',
        )
    with pytest.raises(NotFoundError):
        session_ledger.update_session(storage, 42, SessionUpdate(notes='late'))
    with pytest.raises(NotFoundError):
        session_ledger.delete_session(storage, 42)


def test_compute_admin_stats_counts_active_rows(storage) -> None:
    mentor, student, cohort = seed_pair(storage)
    storage.update_student_registration(student.id, {'is_active': False})
    storage.update_cohort(cohort.id, {'is_active': False})
    relationships.create_assignment(storage, mentor.id, student.id)

    stats = compute_admin_stats(storage)

    assert stats.total_students == 1
    assert stats.active_students == 0
    assert stats.total_mentors == 1
    assert stats.active_mentors == 1
    assert stats.total_assignments == 1
    assert stats.total_cohorts == 1
    assert stats.active_cohorts == 0
