from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from form_service.config import AppConfig, load_config
from form_service.db.migrations_runner import apply_migrations
from form_service.http.problem import (
    handle_domain_error,
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from form_service.http.request_id import RequestIdMiddleware
from form_service.logging_setup import configure_logging
from form_service.logic.errors import FormServiceError
from form_service.logic.repositories import FormStore, build_form_store
from form_service.logic.submission_orchestrator import SubmissionOrchestrator
from form_service.middleware.cors import apply_cors
from form_service.routes import api_router

logger = logging.getLogger(__name__)


def _health_check(store: FormStore) -> Callable[[], dict]:
    def check() -> dict:
        db_ok = store.ping()
        return {"status": "ok" if db_ok else "degraded", "db": db_ok}

    return check


def _apply_startup_migrations(config: AppConfig, store: FormStore) -> None:
    engine = getattr(store, "engine", None)
    if engine is None:
        logger.info("startup_migrations_skipped backend=%s", config.store.backend)
        return
    if not config.database.auto_apply_migrations:
        logger.info("startup_migrations_disabled")
        return
    applied = apply_migrations(engine)
    logger.info("startup_migrations_done applied=%s", applied)


def create_app(
    config: AppConfig | None = None,
    store: FormStore | None = None,
    *,
    enable_test_support: bool = False,
) -> FastAPI:
    """Build the ASGI application.

    ``store`` overrides the backend chosen by ``config.store.backend``; tests
    pass an in-memory store or a SQL store bound to a scratch database.
    """
    config = config or load_config()
    configure_logging(config.logging.level)
    store = store if store is not None else build_form_store(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        _apply_startup_migrations(config, store)
        yield

    app = FastAPI(title="Form Submission Service", lifespan=lifespan)
    app.state.config = config
    app.state.store = store
    app.state.orchestrator = SubmissionOrchestrator(store)

    app.add_exception_handler(FormServiceError, handle_domain_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    apply_cors(app)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix="/api/form")
    if enable_test_support:
        from form_service.routes.test_support import router as test_support_router

        app.include_router(test_support_router)

    health_check = _health_check(store)

    @app.get("/health")
    def health():  # pragma: no cover - trivial
        return health_check()

    return app


__all__ = ["create_app"]
