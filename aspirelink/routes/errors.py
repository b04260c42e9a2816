import logging

from fastapi import HTTPException, status

from aspirelink.storage.base import StorageError

logger = logging.getLogger(__name__)


def storage_unavailable(exc: StorageError) -> HTTPException:
    logger.exception('Storage unavailable: %s', exc)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail='Storage unavailable. Verify STORAGE_BACKEND and DATABASE_URL.',
    )


def not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def conflict(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)
