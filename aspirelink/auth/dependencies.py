import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from aspirelink.auth import jwt_handler
from aspirelink.auth.principal import Principal
from aspirelink.core.roles import Role
from aspirelink.routes.errors import storage_unavailable
from aspirelink.schemas.records import UserRecord
from aspirelink.schemas.requests import normalize_email
from aspirelink.storage.base import Storage, StorageError

security = HTTPBearer(auto_error=False)


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    try:
        payload = jwt_handler.decode_access_token(credentials.credentials)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    uid = payload.get("sub")
    if not uid:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token subject")

    return Principal(
        uid=uid,
        email=normalize_email(payload.get("email")),
        display_name=payload.get("name"),
    )


def require_role(role: Role):
    """Dependency factory that admits only identities holding ``role``."""

    def dependency(
        principal: Principal = Depends(get_principal),
        storage: Storage = Depends(get_storage),
    ) -> UserRecord:
        try:
            user = storage.get_user(principal.uid)
        except StorageError as exc:
            raise storage_unavailable(exc) from exc

        if user is None or user.role is not role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Forbidden - {role.value.capitalize()} access required",
            )
        return user

    return dependency


require_admin = require_role(Role.ADMIN)
require_mentor = require_role(Role.MENTOR)
require_student = require_role(Role.STUDENT)
