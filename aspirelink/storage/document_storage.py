"""Firestore adapter.

Rows are documents in named collections, keyed by the string form of their
id. Integer ids come from a per-collection counter document that is read,
incremented and written back on every create, so two concurrent creates can
collide and the later write wins.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import Any, TypeVar

from google.api_core.exceptions import GoogleAPICallError
from google.cloud.firestore_v1.base_query import FieldFilter
from pydantic import BaseModel

from aspirelink.core.roles import Role
from aspirelink.schemas.records import (
    AdminUserRecord,
    AssignmentRecord,
    CohortMemberRecord,
    CohortRecord,
    ContactRecord,
    MentorRegistrationRecord,
    MentoringSessionRecord,
    StudentRegistrationRecord,
    UserRecord,
)
from aspirelink.schemas.requests import normalize_email
from aspirelink.storage.base import Storage, StorageError

logger = logging.getLogger(__name__)

RecordT = TypeVar('RecordT', bound=BaseModel)

USERS = 'users'
ADMIN_USERS = 'admin_users'
CONTACTS = 'contacts'
MENTOR_REGISTRATIONS = 'mentor_registrations'
STUDENT_REGISTRATIONS = 'student_registrations'
COHORTS = 'cohorts'
COHORT_MEMBERS = 'cohort_members'
ASSIGNMENTS = 'assignments'
SESSIONS = 'mentoring_sessions'
COUNTERS = 'counters'

REGISTRATION_DEFAULTS = {
    'user_id': None,
    'is_active': True,
    'agreed_to_commitment': False,
    'consent_to_contact': False,
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _document_values(data: dict[str, Any]) -> dict[str, Any]:
    values = {
        key: value.value if isinstance(value, Enum) else value
        for key, value in data.items()
    }
    if 'email' in values:
        values['email'] = normalize_email(values['email'])
    return values


def _sort_key(field: str) -> Callable[[dict[str, Any]], Any]:
    epoch = datetime.min.replace(tzinfo=timezone.utc)

    def key(document: dict[str, Any]) -> Any:
        value = document.get(field)
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value if value is not None else epoch

    return key


class DocumentStorage(Storage):
    """Document adapter over a ``google.cloud.firestore.Client``."""

    def __init__(self, client):
        self._client = client

    @contextmanager
    def _firestore_call(self) -> Iterator[None]:
        try:
            yield
        except GoogleAPICallError as exc:
            logger.exception('Firestore operation failed')
            raise StorageError('Storage operation failed.') from exc

    def _document(self, collection: str, doc_id):
        return self._client.collection(collection).document(str(doc_id))

    def _next_id(self, collection: str) -> int:
        counter_ref = self._document(COUNTERS, collection)
        counter_doc = counter_ref.get()
        current = (counter_doc.to_dict() or {}).get('count', 0) if counter_doc.exists else 0
        next_id = current + 1
        counter_ref.set({'count': next_id})
        return next_id

    def _insert(
        self,
        collection: str,
        record_type: type[RecordT],
        data: dict[str, Any],
        *,
        timestamp_field: str = 'created_at',
        defaults: dict[str, Any] | None = None,
    ) -> RecordT:
        document = {**(defaults or {}), **_document_values(data)}
        if document.get(timestamp_field) is None:
            document[timestamp_field] = _now()

        with self._firestore_call():
            document['id'] = self._next_id(collection)
            doc_ref = self._document(collection, document['id'])
            doc_ref.set(document)
            return record_type.model_validate(doc_ref.get().to_dict())

    def _fetch(self, collection: str, record_type: type[RecordT], doc_id) -> RecordT | None:
        with self._firestore_call():
            snapshot = self._document(collection, doc_id).get()
        return record_type.model_validate(snapshot.to_dict()) if snapshot.exists else None

    def _stream(self, collection: str, filters: dict[str, Any]):
        query = self._client.collection(collection)
        for field, value in filters.items():
            query = query.where(filter=FieldFilter(field, '==', value))
        return query.stream()

    def _where(
        self,
        collection: str,
        record_type: type[RecordT],
        *,
        order_by: str = 'id',
        descending: bool = False,
        **filters: Any,
    ) -> list[RecordT]:
        with self._firestore_call():
            documents = [snapshot.to_dict() for snapshot in self._stream(collection, filters)]
        # Sorted here so equality queries need no composite index.
        documents.sort(key=_sort_key(order_by), reverse=descending)
        return [record_type.model_validate(document) for document in documents]

    def _first_where(self, collection: str, record_type: type[RecordT], **filters: Any) -> RecordT | None:
        matches = self._where(collection, record_type, **filters)
        return matches[0] if matches else None

    def _merge(
        self,
        collection: str,
        record_type: type[RecordT],
        doc_id,
        updates: dict[str, Any],
    ) -> RecordT | None:
        with self._firestore_call():
            doc_ref = self._document(collection, doc_id)
            if not doc_ref.get().exists:
                return None

            values = _document_values(updates)
            if values:
                doc_ref.update(values)
            return record_type.model_validate(doc_ref.get().to_dict())

    def _remove(self, collection: str, doc_id) -> bool:
        with self._firestore_call():
            doc_ref = self._document(collection, doc_id)
            if not doc_ref.get().exists:
                return False
            doc_ref.delete()
        return True

    # Users

    def get_user(self, user_id: str) -> UserRecord | None:
        return self._fetch(USERS, UserRecord, user_id)

    def get_user_by_email(self, email: str) -> UserRecord | None:
        return self._first_where(USERS, UserRecord, email=normalize_email(email))

    def upsert_user(self, user_id: str, data: dict[str, Any]) -> UserRecord:
        now = _now()
        with self._firestore_call():
            doc_ref = self._document(USERS, user_id)
            document = {} if doc_ref.get().exists else {'id': user_id, 'role': None, 'created_at': now}
            document.update(_document_values(data))
            document['updated_at'] = now
            doc_ref.set(document, merge=True)
            return UserRecord.model_validate(doc_ref.get().to_dict())

    def update_user_role(
        self,
        user_id: str,
        role: Role | None,
        registration_id: int | None = None,
    ) -> UserRecord | None:
        updates: dict[str, Any] = {'role': role, 'updated_at': _now()}
        if registration_id is not None:
            if role is Role.MENTOR:
                updates['mentor_registration_id'] = registration_id
            elif role is Role.STUDENT:
                updates['student_registration_id'] = registration_id
        return self._merge(USERS, UserRecord, user_id, updates)

    # Admin allow-list

    def get_admin_by_email(self, email: str) -> AdminUserRecord | None:
        normalized = normalize_email(email)
        return self._first_where(ADMIN_USERS, AdminUserRecord, email=normalized)

    def create_admin(self, email: str) -> AdminUserRecord:
        return self._insert(ADMIN_USERS, AdminUserRecord, {'email': email})

    # Contacts

    def create_contact(self, data: dict[str, Any]) -> ContactRecord:
        return self._insert(CONTACTS, ContactRecord, data)

    def list_contacts(self) -> list[ContactRecord]:
        return self._where(CONTACTS, ContactRecord, order_by='created_at', descending=True)

    # Mentor registrations

    def create_mentor_registration(self, data: dict[str, Any]) -> MentorRegistrationRecord:
        return self._insert(
            MENTOR_REGISTRATIONS,
            MentorRegistrationRecord,
            data,
            defaults=REGISTRATION_DEFAULTS,
        )

    def list_mentor_registrations(self) -> list[MentorRegistrationRecord]:
        return self._where(
            MENTOR_REGISTRATIONS,
            MentorRegistrationRecord,
            order_by='created_at',
            descending=True,
        )

    def get_mentor_registration(self, registration_id: int) -> MentorRegistrationRecord | None:
        return self._fetch(MENTOR_REGISTRATIONS, MentorRegistrationRecord, registration_id)

    def get_mentor_by_user_id(self, user_id: str) -> MentorRegistrationRecord | None:
        return self._first_where(
            MENTOR_REGISTRATIONS,
            MentorRegistrationRecord,
            user_id=user_id,
        )

    def get_mentor_by_email(self, email: str) -> MentorRegistrationRecord | None:
        normalized = normalize_email(email)
        return self._first_where(
            MENTOR_REGISTRATIONS,
            MentorRegistrationRecord,
            email=normalized,
        )

    def update_mentor_registration(
        self,
        registration_id: int,
        updates: dict[str, Any],
    ) -> MentorRegistrationRecord | None:
        return self._merge(MENTOR_REGISTRATIONS, MentorRegistrationRecord, registration_id, updates)

    def delete_mentor_registration(self, registration_id: int) -> bool:
        return self._remove(MENTOR_REGISTRATIONS, registration_id)

    # Student registrations

    def create_student_registration(self, data: dict[str, Any]) -> StudentRegistrationRecord:
        return self._insert(
            STUDENT_REGISTRATIONS,
            StudentRegistrationRecord,
            data,
            defaults=REGISTRATION_DEFAULTS,
        )

    def list_student_registrations(self) -> list[StudentRegistrationRecord]:
        return self._where(
            STUDENT_REGISTRATIONS,
            StudentRegistrationRecord,
            order_by='created_at',
            descending=True,
        )

    def get_student_registration(self, registration_id: int) -> StudentRegistrationRecord | None:
        return self._fetch(STUDENT_REGISTRATIONS, StudentRegistrationRecord, registration_id)

    def get_student_by_user_id(self, user_id: str) -> StudentRegistrationRecord | None:
        return self._first_where(
            STUDENT_REGISTRATIONS,
            StudentRegistrationRecord,
            user_id=user_id,
        )

    def get_student_by_email(self, email: str) -> StudentRegistrationRecord | None:
        normalized = normalize_email(email)
        return self._first_where(
            STUDENT_REGISTRATIONS,
            StudentRegistrationRecord,
            email=normalized,
        )

    def update_student_registration(
        self,
        registration_id: int,
        updates: dict[str, Any],
    ) -> StudentRegistrationRecord | None:
        return self._merge(STUDENT_REGISTRATIONS, StudentRegistrationRecord, registration_id, updates)

    def delete_student_registration(self, registration_id: int) -> bool:
        return self._remove(STUDENT_REGISTRATIONS, registration_id)

    # Cohorts

    def create_cohort(self, data: dict[str, Any]) -> CohortRecord:
        return self._insert(COHORTS, CohortRecord, data, defaults={'is_active': True})

    def list_cohorts(self) -> list[CohortRecord]:
        return self._where(COHORTS, CohortRecord, order_by='created_at', descending=True)

    def get_cohort(self, cohort_id: int) -> CohortRecord | None:
        return self._fetch(COHORTS, CohortRecord, cohort_id)

    def update_cohort(self, cohort_id: int, updates: dict[str, Any]) -> CohortRecord | None:
        return self._merge(COHORTS, CohortRecord, cohort_id, updates)

    def delete_cohort(self, cohort_id: int) -> bool:
        return self._remove(COHORTS, cohort_id)

    # Cohort members

    def add_cohort_member(self, data: dict[str, Any]) -> CohortMemberRecord:
        return self._insert(
            COHORT_MEMBERS,
            CohortMemberRecord,
            data,
            timestamp_field='joined_at',
            defaults={'is_active': True},
        )

    def list_cohort_members(self, cohort_id: int) -> list[CohortMemberRecord]:
        return self._where(COHORT_MEMBERS, CohortMemberRecord, cohort_id=cohort_id)

    def list_memberships_for_user(self, user_id: str) -> list[CohortMemberRecord]:
        return self._where(COHORT_MEMBERS, CohortMemberRecord, user_id=user_id)

    def remove_cohort_member(self, cohort_id: int, user_id: str) -> int:
        removed = 0
        with self._firestore_call():
            for snapshot in self._stream(COHORT_MEMBERS, {'cohort_id': cohort_id, 'user_id': user_id}):
                snapshot.reference.delete()
                removed += 1
        return removed

    # Assignments

    def create_assignment(self, data: dict[str, Any]) -> AssignmentRecord:
        return self._insert(
            ASSIGNMENTS,
            AssignmentRecord,
            data,
            timestamp_field='assigned_at',
            defaults={'is_active': True},
        )

    def get_assignment(self, assignment_id: int) -> AssignmentRecord | None:
        return self._fetch(ASSIGNMENTS, AssignmentRecord, assignment_id)

    def list_assignments(self) -> list[AssignmentRecord]:
        return self._where(ASSIGNMENTS, AssignmentRecord, order_by='assigned_at', descending=True)

    def list_assignments_by_cohort(self, cohort_id: int) -> list[AssignmentRecord]:
        return self._where(ASSIGNMENTS, AssignmentRecord, cohort_id=cohort_id)

    def list_assignments_by_mentor(self, mentor_id: int) -> list[AssignmentRecord]:
        return self._where(ASSIGNMENTS, AssignmentRecord, mentor_id=mentor_id)

    def list_assignments_by_student(self, student_id: int) -> list[AssignmentRecord]:
        return self._where(ASSIGNMENTS, AssignmentRecord, student_id=student_id)

    def list_assignments_by_mentor_user(self, user_id: str) -> list[AssignmentRecord]:
        return self._where(ASSIGNMENTS, AssignmentRecord, mentor_user_id=user_id)

    def list_assignments_by_student_user(self, user_id: str) -> list[AssignmentRecord]:
        return self._where(ASSIGNMENTS, AssignmentRecord, student_user_id=user_id)

    def delete_assignment(self, assignment_id: int) -> bool:
        return self._remove(ASSIGNMENTS, assignment_id)

    # Mentoring sessions

    def create_session(self, data: dict[str, Any]) -> MentoringSessionRecord:
        now = _now()
        return self._insert(SESSIONS, MentoringSessionRecord, {**data, 'created_at': now, 'updated_at': now})

    def get_session(self, session_id: int) -> MentoringSessionRecord | None:
        return self._fetch(SESSIONS, MentoringSessionRecord, session_id)

    def list_sessions_by_assignment(self, assignment_id: int) -> list[MentoringSessionRecord]:
        return self._where(
            SESSIONS,
            MentoringSessionRecord,
            assignment_id=assignment_id,
            order_by='scheduled_date',
        )

    def list_sessions_by_cohort(self, cohort_id: int) -> list[MentoringSessionRecord]:
        return self._where(
            SESSIONS,
            MentoringSessionRecord,
            cohort_id=cohort_id,
            order_by='scheduled_date',
        )

    def update_session(self, session_id: int, updates: dict[str, Any]) -> MentoringSessionRecord | None:
        return self._merge(SESSIONS, MentoringSessionRecord, session_id, {**updates, 'updated_at': _now()})

    def delete_session(self, session_id: int) -> bool:
        return self._remove(SESSIONS, session_id)
