"""FastAPI application factory for the registration form service.

`create_app()` wires cross-cutting middleware (request id, CORS), the
problem+json exception handlers, the API routers under `/api` and the static
directory holding `schema.json` under `/static`. The Schema Document is read
once here and held on `app.state.schema_store`; migrations run at startup
when enabled.

Run with: `uvicorn udyamform.main:create_app --factory`.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles

from udyamform.config import AppConfig, load_config
from udyamform.db.base import get_engine
from udyamform.db.migrations_runner import apply_migrations
from udyamform.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from udyamform.http.request_id import RequestIdMiddleware
from udyamform.logging_setup import configure_logging
from udyamform.logic.schema_store import SchemaStore
from udyamform.middleware.cors import apply_cors
from udyamform.routes import api_router

logger = logging.getLogger(__name__)


def _run_startup_migrations(config: AppConfig) -> None:
    if not config.database.auto_apply_migrations:
        logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")
        return
    try:
        applied = apply_migrations(get_engine(config.database.dsn), config.database.migrations_dir)
    except Exception:
        logger.error("Failed to apply migrations at startup", exc_info=True)
        raise
    logger.info("startup_migrations_done applied=%s", applied)


def create_app(config: AppConfig | None = None) -> FastAPI:
    config = config or load_config()
    configure_logging(config.server.log_level)

    # Bind the engine to the configured DSN before any repository call
    get_engine(config.database.dsn)

    schema_store = SchemaStore(config.schema_doc.path)
    schema_store.load()

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        _run_startup_migrations(config)
        yield

    app = FastAPI(title="Udyam Registration Form API", lifespan=lifespan)
    app.state.config = config
    app.state.schema_store = schema_store

    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    apply_cors(app, origins=config.server.cors_origins)
    # Registered last so it wraps CORS and echoes the id on every response
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix="/api")
    if config.server.expose_internal_routes:
        from udyamform.routes.internal import router as internal_router

        app.include_router(internal_router)
        logger.info("internal_routes_enabled")

    static_dir = config.schema_doc.static_dir
    if static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")
    else:
        logger.warning("static_dir_missing path=%s; /static fallback disabled", static_dir)

    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
