import logging

from google.cloud import firestore

from aspirelink.database import create_session_factory
from aspirelink.storage.base import Storage
from aspirelink.storage.document_storage import DocumentStorage
from aspirelink.storage.sql_storage import SqlStorage

logger = logging.getLogger(__name__)

SQL_BACKEND = 'sql'
DOCUMENT_BACKEND = 'document'


def build_storage(
    backend: str,
    database_url: str | None = None,
    echo: bool = False,
    firestore_project: str | None = None,
) -> Storage:
    """Build the storage adapter named by ``backend``.

    The document backend connects with application default credentials, or to
    the emulator named by ``FIRESTORE_EMULATOR_HOST``.

    Raises:
        ValueError: If the backend is unknown or ``sql`` is chosen without a URL.
    """
    normalized_backend = backend.strip().lower()

    if normalized_backend == SQL_BACKEND:
        if not database_url:
            raise ValueError('DATABASE_URL is required for the sql storage backend.')
        logger.info('Using relational storage backend')
        return SqlStorage(create_session_factory(database_url, echo=echo))

    if normalized_backend == DOCUMENT_BACKEND:
        logger.info('Using Firestore storage backend (project=%s)', firestore_project or 'default')
        return DocumentStorage(firestore.Client(project=firestore_project))

    raise ValueError(
        f"Invalid STORAGE_BACKEND: {backend}. Must be '{SQL_BACKEND}' or '{DOCUMENT_BACKEND}'."
    )
