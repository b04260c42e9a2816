import logging

from fastapi import APIRouter, Depends, HTTPException, status

from aspirelink.auth.dependencies import get_storage, require_admin
from aspirelink.core.errors import ConflictError, NotFoundError
from aspirelink.routes.errors import conflict, not_found, storage_unavailable
from aspirelink.schemas.records import (
    AssignmentRecord,
    MentorRegistrationRecord,
    StudentRegistrationRecord,
    UserRecord,
)
from aspirelink.schemas.requests import (
    AssignmentCreate,
    BulkDeleteRequest,
    MentorRegistrationCreate,
    MentorRegistrationUpdate,
    RoleUpdate,
    StatusUpdate,
    StudentRegistrationCreate,
    StudentRegistrationUpdate,
)
from aspirelink.schemas.responses import AdminStats, BulkDeleteResponse, NamedAssignment
from aspirelink.services import identity_linking, registrations, relationships
from aspirelink.services.admin_stats import compute_admin_stats
from aspirelink.storage.base import Storage, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/admin', tags=['admin'], dependencies=[Depends(require_admin)])


@router.put('/users/{user_id}/role', response_model=UserRecord)
def update_user_role(user_id: str, data: RoleUpdate, storage: Storage = Depends(get_storage)):
    try:
        return identity_linking.set_user_role(storage, user_id, data.role)
    except NotFoundError as exc:
        raise not_found(str(exc)) from exc
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.get('/stats', response_model=AdminStats)
def get_stats(storage: Storage = Depends(get_storage)):
    try:
        return compute_admin_stats(storage)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.get('/students', response_model=list[StudentRegistrationRecord])
def list_students(storage: Storage = Depends(get_storage)):
    try:
        return storage.list_student_registrations()
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.post('/students', response_model=StudentRegistrationRecord, status_code=status.HTTP_201_CREATED)
def create_student(data: StudentRegistrationCreate, storage: Storage = Depends(get_storage)):
    try:
        return registrations.create_student_registration(storage, data)
    except ConflictError as exc:
        raise conflict(str(exc)) from exc
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.get('/students/{student_id}', response_model=StudentRegistrationRecord)
def get_student(student_id: int, storage: Storage = Depends(get_storage)):
    try:
        student = storage.get_student_registration(student_id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    if student is None:
        raise not_found('Student not found.')
    return student


@router.put('/students/{student_id}', response_model=StudentRegistrationRecord)
def update_student(
    student_id: int,
    data: StudentRegistrationUpdate,
    storage: Storage = Depends(get_storage),
):
    try:
        return registrations.update_student_registration(storage, student_id, data)
    except NotFoundError as exc:
        raise not_found(str(exc)) from exc
    except ConflictError as exc:
        raise conflict(str(exc)) from exc
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.put('/students/{student_id}/status', response_model=StudentRegistrationRecord)
def update_student_status(student_id: int, data: StatusUpdate, storage: Storage = Depends(get_storage)):
    try:
        student = storage.update_student_registration(student_id, {'is_active': data.is_active})
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    if student is None:
        raise not_found('Student not found.')
    return student


@router.delete('/students/{student_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_student(student_id: int, storage: Storage = Depends(get_storage)):
    try:
        deleted = storage.delete_student_registration(student_id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    if not deleted:
        raise not_found('Student not found.')
    logger.info('Student registration %s deleted', student_id)


@router.get('/mentors', response_model=list[MentorRegistrationRecord])
def list_mentors(storage: Storage = Depends(get_storage)):
    try:
        return storage.list_mentor_registrations()
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.post('/mentors', response_model=MentorRegistrationRecord, status_code=status.HTTP_201_CREATED)
def create_mentor(data: MentorRegistrationCreate, storage: Storage = Depends(get_storage)):
    try:
        return registrations.create_mentor_registration(storage, data)
    except ConflictError as exc:
        raise conflict(str(exc)) from exc
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.get('/mentors/{mentor_id}', response_model=MentorRegistrationRecord)
def get_mentor(mentor_id: int, storage: Storage = Depends(get_storage)):
    try:
        mentor = storage.get_mentor_registration(mentor_id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    if mentor is None:
        raise not_found('Mentor not found.')
    return mentor


@router.put('/mentors/{mentor_id}', response_model=MentorRegistrationRecord)
def update_mentor(
    mentor_id: int,
    data: MentorRegistrationUpdate,
    storage: Storage = Depends(get_storage),
):
    try:
        return registrations.update_mentor_registration(storage, mentor_id, data)
    except NotFoundError as exc:
        raise not_found(str(exc)) from exc
    except ConflictError as exc:
        raise conflict(str(exc)) from exc
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.put('/mentors/{mentor_id}/status', response_model=MentorRegistrationRecord)
def update_mentor_status(mentor_id: int, data: StatusUpdate, storage: Storage = Depends(get_storage)):
    try:
        mentor = storage.update_mentor_registration(mentor_id, {'is_active': data.is_active})
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    if mentor is None:
        raise not_found('Mentor not found.')
    return mentor


@router.delete('/mentors/{mentor_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_mentor(mentor_id: int, storage: Storage = Depends(get_storage)):
    try:
        deleted = storage.delete_mentor_registration(mentor_id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    if not deleted:
        raise not_found('Mentor not found.')
    logger.info('Mentor registration %s deleted', mentor_id)


@router.get('/assignments', response_model=list[NamedAssignment])
def list_assignments(storage: Storage = Depends(get_storage)):
    try:
        return relationships.list_all_assignments(storage)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.post('/assignments', response_model=AssignmentRecord, status_code=status.HTTP_201_CREATED)
def create_assignment(data: AssignmentCreate, storage: Storage = Depends(get_storage)):
    try:
        return relationships.create_assignment(storage, data.mentor_id, data.student_id, data.cohort_id)
    except NotFoundError as exc:
        raise not_found(str(exc)) from exc
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.post('/assignments/bulk-delete', response_model=BulkDeleteResponse)
def bulk_delete_assignments(data: BulkDeleteRequest, storage: Storage = Depends(get_storage)):
    if not data.assignment_ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='No assignment IDs provided')

    try:
        deleted_count = sum(1 for assignment_id in data.assignment_ids if storage.delete_assignment(assignment_id))
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    logger.info('Bulk-deleted %s of %s assignments', deleted_count, len(data.assignment_ids))
    return BulkDeleteResponse(
        deleted_count=deleted_count,
        message=f'Successfully deleted {deleted_count} assignment(s)',
    )


@router.delete('/assignments/{assignment_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(assignment_id: int, storage: Storage = Depends(get_storage)):
    try:
        deleted = storage.delete_assignment(assignment_id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    if not deleted:
        raise not_found('Assignment not found.')
