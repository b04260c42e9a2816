from fastapi import APIRouter, Depends

from aspirelink.auth.dependencies import get_storage, require_mentor, require_student
from aspirelink.core.roles import Role
from aspirelink.routes.errors import storage_unavailable
from aspirelink.schemas.records import CohortRecord, UserRecord
from aspirelink.schemas.responses import EnrichedAssignment
from aspirelink.services import relationships
from aspirelink.storage.base import Storage, StorageError

router = APIRouter(tags=['dashboards'])


@router.get('/mentor/assignments', response_model=list[EnrichedAssignment])
def list_mentor_assignments(
    mentor: UserRecord = Depends(require_mentor),
    storage: Storage = Depends(get_storage),
):
    try:
        return relationships.list_assignments_for_user(storage, mentor.id, Role.MENTOR)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.get('/mentor/cohorts', response_model=list[CohortRecord])
def list_mentor_cohorts(
    mentor: UserRecord = Depends(require_mentor),
    storage: Storage = Depends(get_storage),
):
    try:
        return relationships.list_cohorts_for_user(storage, mentor.id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.get('/student/assignments', response_model=list[EnrichedAssignment])
def list_student_assignments(
    student: UserRecord = Depends(require_student),
    storage: Storage = Depends(get_storage),
):
    try:
        return relationships.list_assignments_for_user(storage, student.id, Role.STUDENT)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.get('/student/cohorts', response_model=list[CohortRecord])
def list_student_cohorts(
    student: UserRecord = Depends(require_student),
    storage: Storage = Depends(get_storage),
):
    try:
        return relationships.list_cohorts_for_user(storage, student.id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc
