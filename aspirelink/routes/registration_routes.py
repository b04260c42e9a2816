from fastapi import APIRouter, Depends, status

from aspirelink.auth.dependencies import get_storage, require_admin
from aspirelink.core.errors import ConflictError
from aspirelink.routes.errors import conflict, storage_unavailable
from aspirelink.schemas.records import ContactRecord, MentorRegistrationRecord, StudentRegistrationRecord
from aspirelink.schemas.requests import ContactCreate, MentorRegistrationCreate, StudentRegistrationCreate
from aspirelink.schemas.responses import RegistrationCreatedResponse
from aspirelink.services import registrations
from aspirelink.storage.base import Storage, StorageError

router = APIRouter(tags=['registrations'])


@router.post(
    '/mentor-registration',
    response_model=RegistrationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_mentor_registration(data: MentorRegistrationCreate, storage: Storage = Depends(get_storage)):
    try:
        registration = registrations.create_mentor_registration(storage, data)
    except ConflictError as exc:
        raise conflict(str(exc)) from exc
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    return RegistrationCreatedResponse(id=registration.id)


@router.post(
    '/student-registration',
    response_model=RegistrationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_student_registration(data: StudentRegistrationCreate, storage: Storage = Depends(get_storage)):
    try:
        registration = registrations.create_student_registration(storage, data)
    except ConflictError as exc:
        raise conflict(str(exc)) from exc
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    return RegistrationCreatedResponse(id=registration.id)


@router.get(
    '/mentor-registrations',
    response_model=list[MentorRegistrationRecord],
    dependencies=[Depends(require_admin)],
)
def list_mentor_registrations(storage: Storage = Depends(get_storage)):
    try:
        return storage.list_mentor_registrations()
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.get(
    '/student-registrations',
    response_model=list[StudentRegistrationRecord],
    dependencies=[Depends(require_admin)],
)
def list_student_registrations(storage: Storage = Depends(get_storage)):
    try:
        return storage.list_student_registrations()
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.post('/contact', response_model=RegistrationCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_contact(data: ContactCreate, storage: Storage = Depends(get_storage)):
    try:
        contact = storage.create_contact(data.model_dump())
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    return RegistrationCreatedResponse(id=contact.id)


@router.get('/contacts', response_model=list[ContactRecord], dependencies=[Depends(require_admin)])
def list_contacts(storage: Storage = Depends(get_storage)):
    try:
        return storage.list_contacts()
    except StorageError as exc:
        raise storage_unavailable(exc) from exc
