"""Storage interface shared by the relational and document adapters.

Every adapter returns the record models from ``aspirelink.schemas.records``
so callers never see ORM objects or raw documents. ``data``/``updates``
arguments are plain dicts of column values. Update methods return ``None``
and delete methods return ``False`` when the target row does not exist.
"""

from abc import ABC, abstractmethod
from typing import Any

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


class StorageError(Exception):
    """Raised by an adapter when the backing store fails."""


class Storage(ABC):
    def init_schema(self) -> None:
        """Prepare the backing store. Adapters without a schema do nothing."""

    # Users

    @abstractmethod
    def get_user(self, user_id: str) -> UserRecord | None: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> UserRecord | None: ...

    @abstractmethod
    def upsert_user(self, user_id: str, data: dict[str, Any]) -> UserRecord: ...

    @abstractmethod
    def update_user_role(
        self,
        user_id: str,
        role: Role | None,
        registration_id: int | None = None,
    ) -> UserRecord | None: ...

    # Admin allow-list

    @abstractmethod
    def get_admin_by_email(self, email: str) -> AdminUserRecord | None: ...

    @abstractmethod
    def create_admin(self, email: str) -> AdminUserRecord: ...

    # Contacts

    @abstractmethod
    def create_contact(self, data: dict[str, Any]) -> ContactRecord: ...

    @abstractmethod
    def list_contacts(self) -> list[ContactRecord]: ...

    # Mentor registrations

    @abstractmethod
    def create_mentor_registration(self, data: dict[str, Any]) -> MentorRegistrationRecord: ...

    @abstractmethod
    def list_mentor_registrations(self) -> list[MentorRegistrationRecord]: ...

    @abstractmethod
    def get_mentor_registration(self, registration_id: int) -> MentorRegistrationRecord | None: ...

    @abstractmethod
    def get_mentor_by_user_id(self, user_id: str) -> MentorRegistrationRecord | None: ...

    @abstractmethod
    def get_mentor_by_email(self, email: str) -> MentorRegistrationRecord | None: ...

    @abstractmethod
    def update_mentor_registration(
        self,
        registration_id: int,
        updates: dict[str, Any],
    ) -> MentorRegistrationRecord | None: ...

    @abstractmethod
    def delete_mentor_registration(self, registration_id: int) -> bool: ...

    # Student registrations

    @abstractmethod
    def create_student_registration(self, data: dict[str, Any]) -> StudentRegistrationRecord: ...

    @abstractmethod
    def list_student_registrations(self) -> list[StudentRegistrationRecord]: ...

    @abstractmethod
    def get_student_registration(self, registration_id: int) -> StudentRegistrationRecord | None: ...

    @abstractmethod
    def get_student_by_user_id(self, user_id: str) -> StudentRegistrationRecord | None: ...

    @abstractmethod
    def get_student_by_email(self, email: str) -> StudentRegistrationRecord | None: ...

    @abstractmethod
    def update_student_registration(
        self,
        registration_id: int,
        updates: dict[str, Any],
    ) -> StudentRegistrationRecord | None: ...

    @abstractmethod
    def delete_student_registration(self, registration_id: int) -> bool: ...

    # Cohorts

    @abstractmethod
    def create_cohort(self, data: dict[str, Any]) -> CohortRecord: ...

    @abstractmethod
    def list_cohorts(self) -> list[CohortRecord]: ...

    @abstractmethod
    def get_cohort(self, cohort_id: int) -> CohortRecord | None: ...

    @abstractmethod
    def update_cohort(self, cohort_id: int, updates: dict[str, Any]) -> CohortRecord | None: ...

    @abstractmethod
    def delete_cohort(self, cohort_id: int) -> bool: ...

    # Cohort members

    @abstractmethod
    def add_cohort_member(self, data: dict[str, Any]) -> CohortMemberRecord: ...

    @abstractmethod
    def list_cohort_members(self, cohort_id: int) -> list[CohortMemberRecord]: ...

    @abstractmethod
    def list_memberships_for_user(self, user_id: str) -> list[CohortMemberRecord]: ...

    @abstractmethod
    def remove_cohort_member(self, cohort_id: int, user_id: str) -> int: ...

    # Assignments

    @abstractmethod
    def create_assignment(self, data: dict[str, Any]) -> AssignmentRecord: ...

    @abstractmethod
    def get_assignment(self, assignment_id: int) -> AssignmentRecord | None: ...

    @abstractmethod
    def list_assignments(self) -> list[AssignmentRecord]: ...

    @abstractmethod
    def list_assignments_by_cohort(self, cohort_id: int) -> list[AssignmentRecord]: ...

    @abstractmethod
    def list_assignments_by_mentor(self, mentor_id: int) -> list[AssignmentRecord]: ...

    @abstractmethod
    def list_assignments_by_student(self, student_id: int) -> list[AssignmentRecord]: ...

    @abstractmethod
    def list_assignments_by_mentor_user(self, user_id: str) -> list[AssignmentRecord]: ...

    @abstractmethod
    def list_assignments_by_student_user(self, user_id: str) -> list[AssignmentRecord]: ...

    @abstractmethod
    def delete_assignment(self, assignment_id: int) -> bool: ...

    # Mentoring sessions

    @abstractmethod
    def create_session(self, data: dict[str, Any]) -> MentoringSessionRecord: ...

    @abstractmethod
    def get_session(self, session_id: int) -> MentoringSessionRecord | None: ...

    @abstractmethod
    def list_sessions_by_assignment(self, assignment_id: int) -> list[MentoringSessionRecord]: ...

    @abstractmethod
    def list_sessions_by_cohort(self, cohort_id: int) -> list[MentoringSessionRecord]: ...

    @abstractmethod
    def update_session(self, session_id: int, updates: dict[str, Any]) -> MentoringSessionRecord | None:
        """Merge ``updates`` onto the session and refresh ``updated_at``."""

    @abstractmethod
    def delete_session(self, session_id: int) -> bool: ...
