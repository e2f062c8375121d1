"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type and the handler callables registered by
`create_app`. Domain errors carry their reason into ``detail``; statuses and
codes come from `form_service.http.error_mapping`.
"""

from __future__ import annotations

from typing import Any
import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from form_service.http.error_mapping import lookup
from form_service.logic.errors import FormServiceError, PersistenceError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem_response(status: int, title: str, detail: str | None = None, **extra: Any) -> JSONResponse:
    body: dict[str, Any] = {"title": title, "status": status}
    if detail is not None:
        body["detail"] = detail
    body.update({k: v for k, v in extra.items() if v is not None})
    return JSONResponse(body, status_code=status, media_type=PROBLEM_MEDIA_TYPE)


async def handle_domain_error(request: Request, exc: FormServiceError) -> JSONResponse:  # noqa: D401
    entry = lookup(exc)
    if isinstance(exc, PersistenceError):
        logger.error(
            "persistence_error path=%s reason=%s", request.url.path, exc.reason, exc_info=exc.__cause__ or exc
        )
    else:
        logger.info(
            "domain_error path=%s code=%s reason=%s", request.url.path, entry["code"], exc.reason
        )
    return problem_response(
        entry["status"],
        entry["title"],
        exc.reason,
        code=entry["code"],
        componentId=exc.component_id,
    )


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status = int(getattr(exc, "status_code", 500) or 500)
    if isinstance(exc.detail, dict):
        body = {"status": status, **exc.detail}
        return JSONResponse(body, status_code=status, media_type=PROBLEM_MEDIA_TYPE, headers=exc.headers)
    return JSONResponse(
        {"title": "Error", "status": status, "detail": str(exc.detail or "")},
        status_code=status,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=exc.headers,
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    return JSONResponse(
        {
            "title": "Invalid Request",
            "status": 422,
            "detail": "Request validation failed",
            "errors": [
                {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
                for e in exc.errors()
            ],
        },
        status_code=422,
        media_type=PROBLEM_MEDIA_TYPE,
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return problem_response(500, "Internal Server Error", "An unexpected error occurred.")


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem_response",
    "handle_domain_error",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
