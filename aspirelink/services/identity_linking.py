"""Link authenticated identities to pre-existing registrations.

People register through the public mentor and student forms before they have
an account. The first time they call ``GET /api/auth/user`` the identity is
created and, if it has no role yet, a role is resolved from the admin
allow-list or from a registration sharing the caller's email.

The role update and the registration ``user_id`` backfill are two separate
writes with no transaction around them. ``resolve_current_user`` therefore
starts every call with a repair step: an identity that already holds a role
and a registration id, whose registration was never stamped with the user id,
gets the backfill redone. Re-invoking the service is the recovery path.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TypeVar

from aspirelink.auth.principal import Principal
from aspirelink.core.errors import NotFoundError
from aspirelink.core.roles import Role
from aspirelink.schemas.records import (
    AdminUserRecord,
    MentorRegistrationRecord,
    RegistrationRecord,
    StudentRegistrationRecord,
    UserRecord,
)
from aspirelink.schemas.requests import normalize_email
from aspirelink.schemas.responses import EmailRegistrationStatus
from aspirelink.storage.base import Storage, StorageError

logger = logging.getLogger(__name__)

LookupResult = TypeVar('LookupResult')

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

ADMIN_WELCOME_MESSAGE = 'Welcome back, Admin! Sign in to access your admin dashboard.'
STUDENT_EXISTS_MESSAGE = (
    'This email is already registered as a student. Please sign in to access your student dashboard.'
)
MENTOR_EXISTS_MESSAGE = (
    'This email is already registered as a mentor. Please sign in to access your mentor dashboard.'
)


def _lookup_or_none(
    lookup: Callable[[str], LookupResult | None],
    email: str,
    label: str,
) -> LookupResult | None:
    try:
        return lookup(email)
    except StorageError:
        logger.warning('%s lookup for %s failed; treating as not found', label, email, exc_info=True)
        return None


def _registration_timestamp(registration: RegistrationRecord) -> datetime:
    created_at = registration.created_at
    if created_at is None:
        return _EPOCH
    if created_at.tzinfo is None:
        return created_at.replace(tzinfo=timezone.utc)
    return created_at


def _fetch_registration(storage: Storage, role: Role, registration_id: int) -> RegistrationRecord | None:
    if role is Role.MENTOR:
        return storage.get_mentor_registration(registration_id)
    if role is Role.STUDENT:
        return storage.get_student_registration(registration_id)
    raise ValueError(f'Role {role.value!r} has no registration.')


def _linked_registration_id(user: UserRecord) -> int | None:
    if user.role is Role.MENTOR:
        return user.mentor_registration_id
    if user.role is Role.STUDENT:
        return user.student_registration_id
    if user.role is Role.ADMIN or user.role is None:
        return None
    raise ValueError(f'Unhandled role {user.role!r}.')


def link_registration(storage: Storage, role: Role, registration: RegistrationRecord, user_id: str) -> bool:
    """Stamp ``user_id`` onto an unlinked registration. Returns True if it wrote."""
    if registration.user_id:
        return False

    if role is Role.MENTOR:
        storage.update_mentor_registration(registration.id, {'user_id': user_id})
    elif role is Role.STUDENT:
        storage.update_student_registration(registration.id, {'user_id': user_id})
    else:
        raise ValueError(f'Role {role.value!r} has no registration.')

    logger.info('Linked %s registration %s to user %s', role.value, registration.id, user_id)
    return True


def ensure_identity(storage: Storage, principal: Principal) -> UserRecord:
    user = storage.get_user(principal.uid)
    if user is not None:
        return user

    logger.info('Creating identity for user %s', principal.uid)
    return storage.upsert_user(
        principal.uid,
        {
            'email': principal.email,
            'full_name': principal.display_name,
            'role': None,
        },
    )


def repair_registration_link(storage: Storage, user: UserRecord) -> bool:
    registration_id = _linked_registration_id(user)
    if registration_id is None:
        return False

    registration = _fetch_registration(storage, user.role, registration_id)
    if registration is None:
        logger.warning(
            'User %s points at missing %s registration %s',
            user.id,
            user.role.value,
            registration_id,
        )
        return False

    return link_registration(storage, user.role, registration, user.id)


def choose_registration(
    student: StudentRegistrationRecord | None,
    mentor: MentorRegistrationRecord | None,
    email: str,
) -> tuple[Role, RegistrationRecord] | None:
    """Pick which registration an email resolves to.

    When both exist the more recently created one wins; equal or missing
    timestamps fall to the student registration.
    """
    if student is not None and mentor is not None:
        logger.warning(
            'User %s has both student (%s) and mentor (%s) registrations; using the most recent one',
            email,
            student.id,
            mentor.id,
        )
        if _registration_timestamp(mentor) > _registration_timestamp(student):
            return Role.MENTOR, mentor
        return Role.STUDENT, student

    if student is not None:
        return Role.STUDENT, student
    if mentor is not None:
        return Role.MENTOR, mentor
    return None


def _assign_role(
    storage: Storage,
    user_id: str,
    role: Role,
    registration_id: int | None = None,
) -> UserRecord:
    user = storage.update_user_role(user_id, role, registration_id)
    if user is None:
        raise NotFoundError(f'User {user_id} not found.')
    return user


def resolve_current_user(storage: Storage, principal: Principal) -> UserRecord:
    """Return the caller's identity, creating and linking it as needed."""
    user = ensure_identity(storage, principal)
    repair_registration_link(storage, user)

    email = principal.email or normalize_email(user.email)
    if user.role is not None or not email:
        return user

    admin: AdminUserRecord | None = _lookup_or_none(storage.get_admin_by_email, email, 'Admin')
    if admin is not None:
        user = _assign_role(storage, user.id, Role.ADMIN)
        logger.info('Assigned admin role to user %s', email)
        return user

    student = _lookup_or_none(storage.get_student_by_email, email, 'Student registration')
    mentor = _lookup_or_none(storage.get_mentor_by_email, email, 'Mentor registration')

    choice = choose_registration(student, mentor, email)
    if choice is None:
        return user

    role, registration = choice
    user = _assign_role(storage, user.id, role, registration.id)
    link_registration(storage, role, registration, user.id)
    logger.info('Assigned %s role to user %s based on registration %s', role.value, email, registration.id)
    return user


def register_identity(
    storage: Storage,
    principal: Principal,
    email: str | None = None,
    display_name: str | None = None,
) -> UserRecord:
    return storage.upsert_user(
        principal.uid,
        {
            'email': normalize_email(email) or principal.email,
            'full_name': display_name or principal.display_name,
        },
    )


def set_user_role(storage: Storage, user_id: str, role: Role | None) -> UserRecord:
    user = storage.update_user_role(user_id, role)
    if user is None:
        raise NotFoundError(f'User {user_id} not found.')

    logger.info('Role of user %s set to %s', user_id, role.value if role is not None else 'none')
    return user


def check_email_registration(storage: Storage, email: str) -> EmailRegistrationStatus:
    if storage.get_admin_by_email(email) is not None:
        return EmailRegistrationStatus(exists=True, type=Role.ADMIN, message=ADMIN_WELCOME_MESSAGE)

    if storage.get_student_by_email(email) is not None:
        return EmailRegistrationStatus(exists=True, type=Role.STUDENT, message=STUDENT_EXISTS_MESSAGE)

    if storage.get_mentor_by_email(email) is not None:
        return EmailRegistrationStatus(exists=True, type=Role.MENTOR, message=MENTOR_EXISTS_MESSAGE)

    return EmailRegistrationStatus(exists=False)


def seed_admin(storage: Storage, email: str) -> tuple[AdminUserRecord, bool]:
    """Add ``email`` to the admin allow-list. Returns the row and whether it was created."""
    existing = storage.get_admin_by_email(email)
    if existing is not None:
        return existing, False

    admin = storage.create_admin(email)
    logger.info('Created admin user: %s', admin.email)
    return admin, True
