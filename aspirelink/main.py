import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from aspirelink.core import config
from aspirelink.core.logging_config import configure_logging
from aspirelink.routes import (
    admin_routes,
    auth_routes,
    cohort_routes,
    dashboard_routes,
    registration_routes,
    session_routes,
)
from aspirelink.storage.base import Storage, StorageError
from aspirelink.storage.factory import build_storage

logger = logging.getLogger(__name__)

API_PREFIX = '/api'


def create_app(storage: Storage | None = None) -> FastAPI:
    """Build the API around ``storage``, or the backend named in configuration."""
    configure_logging(config.LOG_LEVEL)
    config.validate_runtime_config()

    if storage is None:
        storage = build_storage(
            config.STORAGE_BACKEND,
            config.DATABASE_URL,
            echo=config.SQL_ECHO,
            firestore_project=config.FIRESTORE_PROJECT_ID,
        )

    app = FastAPI(title='AspireLink API')
    app.state.storage = storage

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    @app.on_event('startup')
    def initialize_storage() -> None:
        try:
            app.state.storage.init_schema()
        except StorageError:
            logger.exception('Storage initialization failed. Check STORAGE_BACKEND and DATABASE_URL.')

    @app.get('/')
    def root():
        return {'status': 'AspireLink API Running'}

    app.include_router(auth_routes.router, prefix=API_PREFIX)
    app.include_router(registration_routes.router, prefix=API_PREFIX)
    app.include_router(cohort_routes.router, prefix=API_PREFIX)
    app.include_router(session_routes.router, prefix=API_PREFIX)
    app.include_router(dashboard_routes.router, prefix=API_PREFIX)
    app.include_router(admin_routes.router, prefix=API_PREFIX)

    return app
