"""Pre-registration records submitted before any account exists."""

import logging

from aspirelink.core.errors import ConflictError, NotFoundError
from aspirelink.schemas.records import MentorRegistrationRecord, StudentRegistrationRecord
from aspirelink.schemas.requests import (
    MentorRegistrationCreate,
    MentorRegistrationUpdate,
    StudentRegistrationCreate,
    StudentRegistrationUpdate,
)
from aspirelink.storage.base import Storage

logger = logging.getLogger(__name__)


def create_mentor_registration(storage: Storage, data: MentorRegistrationCreate) -> MentorRegistrationRecord:
    """Store a mentor profile, unlinked. One mentor registration per email."""
    if storage.get_mentor_by_email(data.email) is not None:
        raise ConflictError('This email is already registered as a mentor.')

    registration = storage.create_mentor_registration({**data.model_dump(), 'user_id': None})
    logger.info('Mentor registration %s created', registration.id)
    return registration


def create_student_registration(storage: Storage, data: StudentRegistrationCreate) -> StudentRegistrationRecord:
    """Store a student profile, unlinked. One student registration per email."""
    if storage.get_student_by_email(data.email) is not None:
        raise ConflictError('This email is already registered as a student.')

    registration = storage.create_student_registration({**data.model_dump(), 'user_id': None})
    logger.info('Student registration %s created', registration.id)
    return registration


def update_mentor_registration(
    storage: Storage,
    registration_id: int,
    patch: MentorRegistrationUpdate,
) -> MentorRegistrationRecord:
    updates = patch.model_dump(exclude_unset=True)
    if 'email' in updates:
        existing = storage.get_mentor_by_email(updates['email'])
        if existing is not None and existing.id != registration_id:
            raise ConflictError('This email is already registered as a mentor.')

    registration = storage.update_mentor_registration(registration_id, updates)
    if registration is None:
        raise NotFoundError('Mentor not found.')
    return registration


def update_student_registration(
    storage: Storage,
    registration_id: int,
    patch: StudentRegistrationUpdate,
) -> StudentRegistrationRecord:
    updates = patch.model_dump(exclude_unset=True)
    if 'email' in updates:
        existing = storage.get_student_by_email(updates['email'])
        if existing is not None and existing.id != registration_id:
            raise ConflictError('This email is already registered as a student.')

    registration = storage.update_student_registration(registration_id, updates)
    if registration is None:
        raise NotFoundError('Student not found.')
    return registration
