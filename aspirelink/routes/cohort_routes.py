import logging

from fastapi import APIRouter, Depends, HTTPException, status

from aspirelink.auth.dependencies import get_storage, require_admin
from aspirelink.core.errors import NotFoundError
from aspirelink.routes.errors import not_found, storage_unavailable
from aspirelink.schemas.records import AssignmentRecord, CohortMemberRecord, CohortRecord, MentoringSessionRecord
from aspirelink.schemas.requests import (
    CohortAssignmentCreate,
    CohortCreate,
    CohortMemberCreate,
    CohortUpdate,
    check_cohort_dates,
)
from aspirelink.schemas.responses import EnrichedCohortMember, NamedAssignment
from aspirelink.services import relationships
from aspirelink.storage.base import Storage, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(tags=['cohorts'], dependencies=[Depends(require_admin)])


def _get_cohort_or_404(storage: Storage, cohort_id: int) -> CohortRecord:
    cohort = storage.get_cohort(cohort_id)
    if cohort is None:
        raise not_found('Cohort not found.')
    return cohort


@router.post('/cohorts', response_model=CohortRecord, status_code=status.HTTP_201_CREATED)
def create_cohort(data: CohortCreate, storage: Storage = Depends(get_storage)):
    try:
        cohort = storage.create_cohort(data.model_dump())
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    logger.info('Cohort %s created: %s', cohort.id, cohort.name)
    return cohort


@router.get('/cohorts', response_model=list[CohortRecord])
def list_cohorts(storage: Storage = Depends(get_storage)):
    try:
        return storage.list_cohorts()
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.get('/cohorts/{cohort_id}', response_model=CohortRecord)
def get_cohort(cohort_id: int, storage: Storage = Depends(get_storage)):
    try:
        return _get_cohort_or_404(storage, cohort_id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.put('/cohorts/{cohort_id}', response_model=CohortRecord)
def update_cohort(cohort_id: int, data: CohortUpdate, storage: Storage = Depends(get_storage)):
    updates = data.model_dump(exclude_unset=True)
    try:
        current = _get_cohort_or_404(storage, cohort_id)
        try:
            check_cohort_dates(
                updates.get('start_date', current.start_date),
                updates.get('end_date', current.end_date),
            )
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

        cohort = storage.update_cohort(cohort_id, updates)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    if cohort is None:
        raise not_found('Cohort not found.')
    return cohort


@router.delete('/cohorts/{cohort_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_cohort(cohort_id: int, storage: Storage = Depends(get_storage)):
    # Members, assignments and sessions are left in place; readers degrade to placeholders.
    try:
        deleted = storage.delete_cohort(cohort_id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    if not deleted:
        raise not_found('Cohort not found.')
    logger.info('Cohort %s deleted', cohort_id)


@router.get('/cohorts/{cohort_id}/members', response_model=list[EnrichedCohortMember])
def list_cohort_members(cohort_id: int, storage: Storage = Depends(get_storage)):
    try:
        return relationships.list_cohort_members(storage, cohort_id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.post(
    '/cohorts/{cohort_id}/members',
    response_model=CohortMemberRecord,
    status_code=status.HTTP_201_CREATED,
)
def add_cohort_member(cohort_id: int, data: CohortMemberCreate, storage: Storage = Depends(get_storage)):
    try:
        _get_cohort_or_404(storage, cohort_id)
        if storage.get_user(data.user_id) is None:
            raise not_found('User not found.')

        member = storage.add_cohort_member(
            {
                'cohort_id': cohort_id,
                'user_id': data.user_id,
                'role': data.role,
                'is_active': True,
            }
        )
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    logger.info('User %s joined cohort %s as %s', data.user_id, cohort_id, data.role.value)
    return member


@router.delete('/cohorts/{cohort_id}/members/{user_id}', status_code=status.HTTP_204_NO_CONTENT)
def remove_cohort_member(cohort_id: int, user_id: str, storage: Storage = Depends(get_storage)):
    try:
        removed = storage.remove_cohort_member(cohort_id, user_id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    if not removed:
        raise not_found('Cohort member not found.')


@router.get('/cohorts/{cohort_id}/assignments', response_model=list[NamedAssignment])
def list_cohort_assignments(cohort_id: int, storage: Storage = Depends(get_storage)):
    try:
        return relationships.list_cohort_assignments(storage, cohort_id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.post(
    '/cohorts/{cohort_id}/assignments',
    response_model=AssignmentRecord,
    status_code=status.HTTP_201_CREATED,
)
def create_cohort_assignment(
    cohort_id: int,
    data: CohortAssignmentCreate,
    storage: Storage = Depends(get_storage),
):
    try:
        return relationships.create_assignment(storage, data.mentor_id, data.student_id, cohort_id)
    except NotFoundError as exc:
        raise not_found(str(exc)) from exc
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.get('/cohorts/{cohort_id}/sessions', response_model=list[MentoringSessionRecord])
def list_cohort_sessions(cohort_id: int, storage: Storage = Depends(get_storage)):
    try:
        return storage.list_sessions_by_cohort(cohort_id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc
