import hmac
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from aspirelink.auth.dependencies import get_principal, get_storage
from aspirelink.auth.principal import Principal
from aspirelink.core import config
from aspirelink.core.errors import NotFoundError
from aspirelink.routes.errors import not_found, storage_unavailable
from aspirelink.schemas.records import UserRecord
from aspirelink.schemas.requests import (
    CheckEmailRequest,
    RegisterIdentityRequest,
    SeedAdminRequest,
    normalize_email,
)
from aspirelink.schemas.responses import EmailRegistrationStatus, SeedAdminResponse
from aspirelink.services import identity_linking
from aspirelink.storage.base import Storage, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(tags=['auth'])


@router.get('/auth/user', response_model=UserRecord)
def get_current_user(
    principal: Principal = Depends(get_principal),
    storage: Storage = Depends(get_storage),
):
    try:
        return identity_linking.resolve_current_user(storage, principal)
    except NotFoundError as exc:
        raise not_found(str(exc)) from exc
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.post('/auth/register', response_model=UserRecord)
def register(
    data: RegisterIdentityRequest,
    principal: Principal = Depends(get_principal),
    storage: Storage = Depends(get_storage),
):
    try:
        return identity_linking.register_identity(storage, principal, data.email, data.display_name)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.post('/check-email-registration', response_model=EmailRegistrationStatus)
def check_email_registration(data: CheckEmailRequest, storage: Storage = Depends(get_storage)):
    email = normalize_email(data.email)
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Email is required')

    try:
        return identity_linking.check_email_registration(storage, email)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc


@router.post('/seed-admin', response_model=SeedAdminResponse)
def seed_admin(data: SeedAdminRequest, storage: Storage = Depends(get_storage)):
    if not hmac.compare_digest(data.secret_key.encode(), config.ADMIN_SEED_SECRET.encode()):
        logger.warning('Rejected admin seed attempt with an invalid secret')
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Invalid secret key')

    email = normalize_email(data.email)
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Email is required')

    try:
        admin, created = identity_linking.seed_admin(storage, email)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    message = 'Admin user created successfully' if created else 'Admin user already exists'
    return SeedAdminResponse(message=message, admin_id=admin.id, email=admin.email)
