from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from aspirelink.auth.dependencies import get_principal, require_admin, require_mentor
from aspirelink.auth.jwt_handler import create_access_token
from aspirelink.auth.principal import Principal
from aspirelink.core import config
from aspirelink.core.roles import Role
from aspirelink.routes.auth_routes import check_email_registration, seed_admin
from aspirelink.schemas.requests import CheckEmailRequest, SeedAdminRequest
from aspirelink.storage.base import StorageError


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)


def test_get_principal_reads_claims_and_normalizes_email() -> None:
    token = create_access_token('uid-1', email=' Pat@Example.COM ', name='Pat')

    principal = get_principal(bearer(token))

    assert principal == Principal(uid='uid-1', email='pat@example.com', display_name='Pat')


def test_get_principal_requires_credentials() -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_principal(None)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Unauthorized'


def test_get_principal_rejects_expired_token() -> None:
    token = create_access_token('uid-1', expires_minutes=-5)

    with pytest.raises(HTTPException) as exception_info:
        get_principal(bearer(token))

    assert exception_info.value.detail == 'Invalid token'


def test_get_principal_rejects_token_without_subject() -> None:
    token = jwt.encode(
        {'email': 'pat@example.com', 'exp': datetime.now(timezone.utc) + timedelta(minutes=5)},
        config.JWT_SECRET_KEY,
        algorithm=config.JWT_ALGORITHM,
    )

    with pytest.raises(HTTPException) as exception_info:
        get_principal(bearer(token))

    assert exception_info.value.detail == 'Invalid token subject'


def test_role_gate_admits_matching_role(document_storage) -> None:
    document_storage.upsert_user('uid-1', {'email': 'pat@example.com', 'role': Role.MENTOR})

    user = require_mentor(principal=Principal(uid='uid-1'), storage=document_storage)

    assert user.id == 'uid-1'


@pytest.mark.parametrize('role', [None, Role.MENTOR])
def test_role_gate_forbids_other_roles(document_storage, role: Role | None) -> None:
    document_storage.upsert_user('uid-1', {'email': 'pat@example.com', 'role': role})

    with pytest.raises(HTTPException) as exception_info:
        require_admin(principal=Principal(uid='uid-1'), storage=document_storage)

    assert exception_info.value.status_code == 403


def test_role_gate_forbids_unknown_identity(document_storage) -> None:
    with pytest.raises(HTTPException) as exception_info:
        require_admin(principal=Principal(uid='ghost'), storage=document_storage)

    assert exception_info.value.status_code == 403


def test_role_gate_maps_storage_errors_to_503(document_storage, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_get_user(user_id: str):
        raise StorageError('down')

    monkeypatch.setattr(document_storage, 'get_user', broken_get_user)

    with pytest.raises(HTTPException) as exception_info:
        require_admin(principal=Principal(uid='uid-1'), storage=document_storage)

    assert exception_info.value.status_code == 503


def test_check_email_registration_route_rejects_missing_email(document_storage) -> None:
    with pytest.raises(HTTPException) as exception_info:
        check_email_registration(CheckEmailRequest(email=None), storage=document_storage)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Email is required'


def test_seed_admin_route_reports_existing_admin(document_storage, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'ADMIN_SEED_SECRET', 'letmein')
    request = SeedAdminRequest(email='Boss@Example.com', secret_key='letmein')

    first = seed_admin(request, storage=document_storage)
    second = seed_admin(request, storage=document_storage)

    assert first.message == 'Admin user created successfully'
    assert second.message == 'Admin user already exists'
    assert second.admin_id == first.admin_id
    assert second.email == 'boss@example.com'
