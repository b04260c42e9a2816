from datetime import datetime, timezone

import pytest
from google.api_core.exceptions import ServiceUnavailable
from sqlalchemy import inspect

from aspirelink.core.roles import Role, SessionStatus
from aspirelink.database import create_session_factory, init_schema
from aspirelink.storage import factory
from aspirelink.storage.base import StorageError
from aspirelink.storage.document_storage import DocumentStorage
from aspirelink.storage.factory import build_storage
from aspirelink.storage.sql_storage import SqlStorage


def make_mentor(storage, email='mentor@example.com', **overrides):
    return storage.create_mentor_registration({'full_name': 'Maya Mentor', 'email': email, **overrides})


def make_student(storage, email='student@example.com', **overrides):
    return storage.create_student_registration({'full_name': 'Sam Student', 'email': email, **overrides})


def make_session(storage, assignment_id: int, day: int = 1):
    return storage.create_session(
        {
            'assignment_id': assignment_id,
            'scheduled_date': datetime(2025, 9, day),
            'scheduled_time': '14:00',
            'status': SessionStatus.SCHEDULED,
        }
    )


def test_document_storage_allocates_sequential_ids_per_collection(document_storage) -> None:
    first_mentor = make_mentor(document_storage, email='one@example.com')
    first_student = make_student(document_storage)
    second_mentor = make_mentor(document_storage, email='two@example.com')

    assert first_mentor.id == 1
    assert second_mentor.id == 2
    assert first_student.id == 1


def test_document_storage_keeps_counter_documents(document_storage, firestore_client) -> None:
    make_mentor(document_storage, email='one@example.com')
    make_mentor(document_storage, email='two@example.com')

    counter = firestore_client.collection('counters').document('mentor_registrations').get()

    assert counter.to_dict() == {'count': 2}


def test_registration_email_is_normalized_on_write_and_lookup(storage) -> None:
    created = make_mentor(storage, email='  Maya@Example.COM ')

    assert created.email == 'maya@example.com'
    assert storage.get_mentor_by_email('MAYA@example.com ').id == created.id


def test_new_registration_is_unlinked_and_active(storage) -> None:
    student = make_student(storage)

    assert student.user_id is None
    assert student.is_active is True
    assert student.created_at is not None


def test_update_and_delete_report_missing_rows(storage) -> None:
    assert storage.update_mentor_registration(999, {'full_name': 'Nobody'}) is None
    assert storage.update_cohort(999, {'name': 'Nothing'}) is None
    assert storage.update_session(999, {'notes': 'none'}) is None
    assert storage.delete_student_registration(999) is False
    assert storage.delete_assignment(999) is False


def test_upsert_user_creates_then_merges(storage) -> None:
    created = storage.upsert_user('uid-1', {'email': 'A@B.com', 'full_name': 'Ada', 'role': None})
    merged = storage.upsert_user('uid-1', {'full_name': 'Ada Lovelace'})

    assert created.role is None
    assert merged.email == 'a@b.com'
    assert merged.full_name == 'Ada Lovelace'
    assert storage.get_user_by_email('a@b.com').id == 'uid-1'


def test_update_user_role_sets_matching_registration_pointer(storage) -> None:
    storage.upsert_user('uid-1', {'email': 'mentor@example.com'})
    mentor = make_mentor(storage)

    user = storage.update_user_role('uid-1', Role.MENTOR, mentor.id)

    assert user.role is Role.MENTOR
    assert user.mentor_registration_id == mentor.id
    assert user.student_registration_id is None
    assert storage.update_user_role('missing', Role.MENTOR) is None


def test_full_listings_are_newest_first(storage) -> None:
    older = make_student(storage, email='older@example.com', created_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
    newer = make_student(storage, email='newer@example.com', created_at=datetime(2025, 6, 1, tzinfo=timezone.utc))

    assert [student.id for student in storage.list_student_registrations()] == [newer.id, older.id]


def test_remove_cohort_member_returns_removed_count(storage) -> None:
    storage.upsert_user('uid-1', {'email': 'student@example.com'})
    cohort = storage.create_cohort(
        {'name': 'Fall 2025', 'start_date': datetime(2025, 9, 1), 'end_date': datetime(2025, 12, 15)}
    )
    storage.add_cohort_member({'cohort_id': cohort.id, 'user_id': 'uid-1', 'role': Role.STUDENT})

    assert storage.list_cohort_members(cohort.id)[0].role is Role.STUDENT
    assert storage.remove_cohort_member(cohort.id, 'uid-1') == 1
    assert storage.remove_cohort_member(cohort.id, 'uid-1') == 0
    assert storage.list_memberships_for_user('uid-1') == []


def test_sessions_list_by_date_and_update_refreshes_timestamp(storage) -> None:
    later = make_session(storage, assignment_id=1, day=20)
    earlier = make_session(storage, assignment_id=1, day=5)
    make_session(storage, assignment_id=2, day=1)

    listed = storage.list_sessions_by_assignment(1)
    assert [session.id for session in listed] == [earlier.id, later.id]

    updated = storage.update_session(later.id, {'status': SessionStatus.COMPLETED})
    assert updated.status is SessionStatus.COMPLETED
    assert updated.scheduled_time == '14:00'
    assert updated.updated_at is not None


def test_assignment_lookups_by_user_and_registration(storage) -> None:
    assignment = storage.create_assignment(
        {'mentor_id': 3, 'student_id': 4, 'mentor_user_id': 'mentor-uid', 'student_user_id': None}
    )

    assert [a.id for a in storage.list_assignments_by_mentor_user('mentor-uid')] == [assignment.id]
    assert [a.id for a in storage.list_assignments_by_student(4)] == [assignment.id]
    assert storage.list_assignments_by_student_user('mentor-uid') == []


def test_sql_storage_wraps_database_errors(sql_storage) -> None:
    sql_storage.create_admin('admin@example.com')

    with pytest.raises(StorageError):
        sql_storage.create_admin('ADMIN@example.com')

    # The failed write is rolled back; the adapter keeps working.
    assert sql_storage.get_admin_by_email('admin@example.com') is not None


def test_init_schema_indexes_lookup_columns() -> None:
    engine = create_session_factory('sqlite://').kw['bind']
    init_schema(engine)
    init_schema(engine)

    inspector = inspect(engine)
    for table_name in ('mentor_registrations', 'student_registrations'):
        indexed = {tuple(index['column_names']) for index in inspector.get_indexes(table_name)}
        assert {('email',), ('user_id',)} <= indexed

    indexed = {tuple(index['column_names']) for index in inspector.get_indexes('mentor_student_assignments')}
    assert {('mentor_user_id',), ('student_user_id',)} <= indexed
    engine.dispose()

def test_document_storage_wraps_firestore_errors(
    document_storage,
    firestore_client,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    make_mentor(document_storage)

    def unavailable(name: str):
        raise ServiceUnavailable('firestore down')

    monkeypatch.setattr(firestore_client, 'collection', unavailable)

    with pytest.raises(StorageError):
        document_storage.get_mentor_by_email('mentor@example.com')
    with pytest.raises(StorageError):
        make_student(document_storage)


def test_build_storage_selects_adapter(firestore_client, monkeypatch: pytest.MonkeyPatch) -> None:
    projects = []

    def fake_client(project=None):
        projects.append(project)
        return firestore_client

    monkeypatch.setattr(factory.firestore, 'Client', fake_client)

    assert isinstance(build_storage('document', firestore_project='aspirelink-dev'), DocumentStorage)
    assert projects == ['aspirelink-dev']
    assert isinstance(build_storage(' SQL ', 'sqlite://'), SqlStorage)


@pytest.mark.parametrize(
    ('backend', 'database_url', 'error_fragment'),
    [
        ('sql', None, 'DATABASE_URL is required'),
        ('firestore', None, 'Invalid STORAGE_BACKEND'),
    ],
)
def test_build_storage_rejects_bad_configuration(backend: str, database_url: str | None, error_fragment: str) -> None:
    with pytest.raises(ValueError) as exception_info:
        build_storage(backend, database_url)

    assert error_fragment in str(exception_info.value)


def test_document_storage_returns_copies(document_storage) -> None:
    mentor = make_mentor(document_storage, skills=['python'])
    mentor.skills.append('mutated')

    assert document_storage.get_mentor_registration(mentor.id).skills == ['python']
