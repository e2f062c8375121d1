"""Central error mapping for domain errors.

Single source of truth for turning `FormServiceError` subclasses into
problem+json codes, titles and HTTP statuses. Handlers look the most
specific class up through the exception's MRO.
"""

from __future__ import annotations

from typing import Any

from form_service.logic.errors import (
    AnswerRejectedError,
    EmptyFormError,
    FormNotFoundError,
    FormServiceError,
    InputShapeError,
    PersistenceError,
    SubmissionNotFoundError,
    UnknownComponentError,
)

DOMAIN_ERROR_MAP: dict[type[FormServiceError], dict[str, Any]] = {
    InputShapeError: {"code": "INPUT_SHAPE_INVALID", "status": 400, "title": "Invalid Request"},
    FormNotFoundError: {"code": "FORM_NOT_FOUND", "status": 404, "title": "Not Found"},
    SubmissionNotFoundError: {"code": "SUBMISSION_NOT_FOUND", "status": 404, "title": "Not Found"},
    EmptyFormError: {"code": "FORM_HAS_NO_COMPONENTS", "status": 400, "title": "Invalid Submission"},
    UnknownComponentError: {"code": "UNKNOWN_COMPONENT", "status": 400, "title": "Invalid Submission"},
    AnswerRejectedError: {"code": "ANSWER_REJECTED", "status": 400, "title": "Invalid Submission"},
    PersistenceError: {"code": "PERSISTENCE_FAILED", "status": 500, "title": "Internal Server Error"},
}

_FALLBACK = {"code": "INTERNAL_ERROR", "status": 500, "title": "Internal Server Error"}


def lookup(exc: FormServiceError) -> dict[str, Any]:
    for cls in type(exc).__mro__:
        entry = DOMAIN_ERROR_MAP.get(cls)  # type: ignore[arg-type]
        if entry is not None:
            return entry
    return _FALLBACK


__all__ = ["DOMAIN_ERROR_MAP", "lookup"]
