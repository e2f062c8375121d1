"""Form submission service.

FastAPI application that validates answers against a form's components and
persists each submission atomically. Business logic lives in
`form_service/logic/`, route handlers in `form_service/routes/`.
"""

from __future__ import annotations

from form_service.main import create_app

__all__ = ["create_app"]
