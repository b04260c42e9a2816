import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from aspirelink.core.roles import Role
from aspirelink.database import init_schema
from aspirelink.models.assignment import Assignment
from aspirelink.models.cohort import Cohort, CohortMember
from aspirelink.models.contact import Contact
from aspirelink.models.mentoring_session import MentoringSession
from aspirelink.models.registration import MentorRegistration, StudentRegistration
from aspirelink.models.user import AdminUser, User
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


def _column_values(data: dict[str, Any]) -> dict[str, Any]:
    values = {
        key: value.value if isinstance(value, Enum) else value
        for key, value in data.items()
    }
    if 'email' in values:
        values['email'] = normalize_email(values['email'])
    return values


class SqlStorage(Storage):
    """Relational adapter backed by a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def init_schema(self) -> None:
        try:
            init_schema(self._session_factory.kw['bind'])
        except SQLAlchemyError as exc:
            raise StorageError('Schema initialisation failed.') from exc

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception('Storage operation failed')
            raise StorageError('Storage operation failed.') from exc
        finally:
            db.close()

    def _create(self, model, record_type: type[BaseModel], data: dict[str, Any]):
        with self._session_scope() as db:
            row = model(**_column_values(data))
            db.add(row)
            db.commit()
            db.refresh(row)
            return record_type.model_validate(row)

    def _get(self, model, record_type: type[BaseModel], row_id):
        with self._session_scope() as db:
            row = db.get(model, row_id)
            return record_type.model_validate(row) if row is not None else None

    def _first(self, model, record_type: type[BaseModel], *criteria):
        with self._session_scope() as db:
            row = db.query(model).filter(*criteria).order_by(model.id.asc()).first()
            return record_type.model_validate(row) if row is not None else None

    def _list(self, model, record_type: type[BaseModel], *criteria, order_by=None):
        with self._session_scope() as db:
            query = db.query(model).filter(*criteria)
            query = query.order_by(order_by if order_by is not None else model.id.asc())
            return [record_type.model_validate(row) for row in query.all()]

    def _update(self, model, record_type: type[BaseModel], row_id, updates: dict[str, Any]):
        with self._session_scope() as db:
            row = db.get(model, row_id)
            if row is None:
                return None

            for key, value in _column_values(updates).items():
                setattr(row, key, value)

            db.commit()
            db.refresh(row)
            return record_type.model_validate(row)

    def _delete(self, model, row_id) -> bool:
        with self._session_scope() as db:
            row = db.get(model, row_id)
            if row is None:
                return False

            db.delete(row)
            db.commit()
            return True

    # Users

    def get_user(self, user_id: str) -> UserRecord | None:
        return self._get(User, UserRecord, user_id)

    def get_user_by_email(self, email: str) -> UserRecord | None:
        return self._first(User, UserRecord, User.email == normalize_email(email))

    def upsert_user(self, user_id: str, data: dict[str, Any]) -> UserRecord:
        with self._session_scope() as db:
            row = db.get(User, user_id)
            if row is None:
                row = User(id=user_id, **_column_values(data))
                db.add(row)
            else:
                for key, value in _column_values(data).items():
                    setattr(row, key, value)

            db.commit()
            db.refresh(row)
            return UserRecord.model_validate(row)

    def update_user_role(
        self,
        user_id: str,
        role: Role | None,
        registration_id: int | None = None,
    ) -> UserRecord | None:
        with self._session_scope() as db:
            row = db.get(User, user_id)
            if row is None:
                return None

            row.role = role.value if role is not None else None
            if registration_id is not None:
                if role is Role.MENTOR:
                    row.mentor_registration_id = registration_id
                elif role is Role.STUDENT:
                    row.student_registration_id = registration_id

            db.commit()
            db.refresh(row)
            return UserRecord.model_validate(row)

    # Admin allow-list

    def get_admin_by_email(self, email: str) -> AdminUserRecord | None:
        return self._first(AdminUser, AdminUserRecord, AdminUser.email == normalize_email(email))

    def create_admin(self, email: str) -> AdminUserRecord:
        return self._create(AdminUser, AdminUserRecord, {'email': email})

    # Contacts

    def create_contact(self, data: dict[str, Any]) -> ContactRecord:
        return self._create(Contact, ContactRecord, data)

    def list_contacts(self) -> list[ContactRecord]:
        return self._list(Contact, ContactRecord, order_by=Contact.created_at.desc())

    # Mentor registrations

    def create_mentor_registration(self, data: dict[str, Any]) -> MentorRegistrationRecord:
        return self._create(MentorRegistration, MentorRegistrationRecord, data)

    def list_mentor_registrations(self) -> list[MentorRegistrationRecord]:
        return self._list(
            MentorRegistration,
            MentorRegistrationRecord,
            order_by=MentorRegistration.created_at.desc(),
        )

    def get_mentor_registration(self, registration_id: int) -> MentorRegistrationRecord | None:
        return self._get(MentorRegistration, MentorRegistrationRecord, registration_id)

    def get_mentor_by_user_id(self, user_id: str) -> MentorRegistrationRecord | None:
        return self._first(MentorRegistration, MentorRegistrationRecord, MentorRegistration.user_id == user_id)

    def get_mentor_by_email(self, email: str) -> MentorRegistrationRecord | None:
        return self._first(
            MentorRegistration,
            MentorRegistrationRecord,
            MentorRegistration.email == normalize_email(email),
        )

    def update_mentor_registration(
        self,
        registration_id: int,
        updates: dict[str, Any],
    ) -> MentorRegistrationRecord | None:
        return self._update(MentorRegistration, MentorRegistrationRecord, registration_id, updates)

    def delete_mentor_registration(self, registration_id: int) -> bool:
        return self._delete(MentorRegistration, registration_id)

    # Student registrations

    def create_student_registration(self, data: dict[str, Any]) -> StudentRegistrationRecord:
        return self._create(StudentRegistration, StudentRegistrationRecord, data)

    def list_student_registrations(self) -> list[StudentRegistrationRecord]:
        return self._list(
            StudentRegistration,
            StudentRegistrationRecord,
            order_by=StudentRegistration.created_at.desc(),
        )

    def get_student_registration(self, registration_id: int) -> StudentRegistrationRecord | None:
        return self._get(StudentRegistration, StudentRegistrationRecord, registration_id)

    def get_student_by_user_id(self, user_id: str) -> StudentRegistrationRecord | None:
        return self._first(StudentRegistration, StudentRegistrationRecord, StudentRegistration.user_id == user_id)

    def get_student_by_email(self, email: str) -> StudentRegistrationRecord | None:
        return self._first(
            StudentRegistration,
            StudentRegistrationRecord,
            StudentRegistration.email == normalize_email(email),
        )

    def update_student_registration(
        self,
        registration_id: int,
        updates: dict[str, Any],
    ) -> StudentRegistrationRecord | None:
        return self._update(StudentRegistration, StudentRegistrationRecord, registration_id, updates)

    def delete_student_registration(self, registration_id: int) -> bool:
        return self._delete(StudentRegistration, registration_id)

    # Cohorts

    def create_cohort(self, data: dict[str, Any]) -> CohortRecord:
        return self._create(Cohort, CohortRecord, data)

    def list_cohorts(self) -> list[CohortRecord]:
        return self._list(Cohort, CohortRecord, order_by=Cohort.created_at.desc())

    def get_cohort(self, cohort_id: int) -> CohortRecord | None:
        return self._get(Cohort, CohortRecord, cohort_id)

    def update_cohort(self, cohort_id: int, updates: dict[str, Any]) -> CohortRecord | None:
        return self._update(Cohort, CohortRecord, cohort_id, updates)

    def delete_cohort(self, cohort_id: int) -> bool:
        return self._delete(Cohort, cohort_id)

    # Cohort members

    def add_cohort_member(self, data: dict[str, Any]) -> CohortMemberRecord:
        return self._create(CohortMember, CohortMemberRecord, data)

    def list_cohort_members(self, cohort_id: int) -> list[CohortMemberRecord]:
        return self._list(CohortMember, CohortMemberRecord, CohortMember.cohort_id == cohort_id)

    def list_memberships_for_user(self, user_id: str) -> list[CohortMemberRecord]:
        return self._list(CohortMember, CohortMemberRecord, CohortMember.user_id == user_id)

    def remove_cohort_member(self, cohort_id: int, user_id: str) -> int:
        with self._session_scope() as db:
            removed = db.query(CohortMember).filter(
                CohortMember.cohort_id == cohort_id,
                CohortMember.user_id == user_id,
            ).delete(synchronize_session=False)
            db.commit()
            return removed

    # Assignments

    def create_assignment(self, data: dict[str, Any]) -> AssignmentRecord:
        return self._create(Assignment, AssignmentRecord, data)

    def get_assignment(self, assignment_id: int) -> AssignmentRecord | None:
        return self._get(Assignment, AssignmentRecord, assignment_id)

    def list_assignments(self) -> list[AssignmentRecord]:
        return self._list(Assignment, AssignmentRecord, order_by=Assignment.assigned_at.desc())

    def list_assignments_by_cohort(self, cohort_id: int) -> list[AssignmentRecord]:
        return self._list(Assignment, AssignmentRecord, Assignment.cohort_id == cohort_id)

    def list_assignments_by_mentor(self, mentor_id: int) -> list[AssignmentRecord]:
        return self._list(Assignment, AssignmentRecord, Assignment.mentor_id == mentor_id)

    def list_assignments_by_student(self, student_id: int) -> list[AssignmentRecord]:
        return self._list(Assignment, AssignmentRecord, Assignment.student_id == student_id)

    def list_assignments_by_mentor_user(self, user_id: str) -> list[AssignmentRecord]:
        return self._list(Assignment, AssignmentRecord, Assignment.mentor_user_id == user_id)

    def list_assignments_by_student_user(self, user_id: str) -> list[AssignmentRecord]:
        return self._list(Assignment, AssignmentRecord, Assignment.student_user_id == user_id)

    def delete_assignment(self, assignment_id: int) -> bool:
        return self._delete(Assignment, assignment_id)

    # Mentoring sessions

    def create_session(self, data: dict[str, Any]) -> MentoringSessionRecord:
        return self._create(MentoringSession, MentoringSessionRecord, data)

    def get_session(self, session_id: int) -> MentoringSessionRecord | None:
        return self._get(MentoringSession, MentoringSessionRecord, session_id)

    def list_sessions_by_assignment(self, assignment_id: int) -> list[MentoringSessionRecord]:
        return self._list(
            MentoringSession,
            MentoringSessionRecord,
            MentoringSession.assignment_id == assignment_id,
            order_by=MentoringSession.scheduled_date.asc(),
        )

    def list_sessions_by_cohort(self, cohort_id: int) -> list[MentoringSessionRecord]:
        return self._list(
            MentoringSession,
            MentoringSessionRecord,
            MentoringSession.cohort_id == cohort_id,
            order_by=MentoringSession.scheduled_date.asc(),
        )

    def update_session(self, session_id: int, updates: dict[str, Any]) -> MentoringSessionRecord | None:
        return self._update(
            MentoringSession,
            MentoringSessionRecord,
            session_id,
            {**updates, 'updated_at': datetime.now(timezone.utc)},
        )

    def delete_session(self, session_id: int) -> bool:
        return self._delete(MentoringSession, session_id)
