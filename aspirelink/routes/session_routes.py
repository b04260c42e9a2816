from fastapi import APIRouter, Depends, status

from aspirelink.auth.dependencies import get_principal, get_storage, require_mentor
from aspirelink.core.errors import NotFoundError
from aspirelink.routes.errors import not_found, storage_unavailable
from aspirelink.schemas.records import MentoringSessionRecord, UserRecord
from aspirelink.schemas.requests import SessionCreate, SessionUpdate
from aspirelink.services import session_ledger
from aspirelink.storage.base import Storage, StorageError

router = APIRouter(tags=['sessions'])


@router.post('/sessions', response_model=MentoringSessionRecord, status_code=status.HTTP_201_CREATED)
def create_session(
    data: SessionCreate,
    mentor: UserRecord = Depends(require_mentor),
    storage: Storage = Depends(get_storage),
):
    try:
        return session_ledger.create_session(storage, data, created_by=mentor.id)
    except NotFoundError as exc:
        raise not_found(str(exc)) from exc
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.get(
    '/assignments/{assignment_id}/sessions',
    response_model=list[MentoringSessionRecord],
    dependencies=[Depends(get_principal)],
)
def list_assignment_sessions(assignment_id: int, storage: Storage = Depends(get_storage)):
    try:
        return session_ledger.list_sessions_for_assignment(storage, assignment_id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.api_route(
    '/sessions/{session_id}',
    methods=['PUT', 'PATCH'],
    response_model=MentoringSessionRecord,
    dependencies=[Depends(get_principal)],
)
def update_session(session_id: int, data: SessionUpdate, storage: Storage = Depends(get_storage)):
    try:
        return session_ledger.update_session(storage, session_id, data)
    except NotFoundError as exc:
        raise not_found(str(exc)) from exc
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.delete(
    '/sessions/{session_id}',
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(get_principal)],
)
def delete_session(session_id: int, storage: Storage = Depends(get_storage)):
    try:
        session_ledger.delete_session(storage, session_id)
    except NotFoundError as exc:
        raise not_found(str(exc)) from exc
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.get(
    '/sessions/{session_id}',
    response_model=MentoringSessionRecord,
    dependencies=[Depends(get_principal)],
)
def get_session(session_id: int, storage: Storage = Depends(get_storage)):
    try:
        session = storage.get_session(session_id)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    if session is None:
        raise not_found('Session not found.')
    return session
