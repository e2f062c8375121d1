"""APIRouter registration for the form service."""

from __future__ import annotations

from fastapi import APIRouter

from form_service.routes.clear import router as clear_router
from form_service.routes.forms import router as forms_router
from form_service.routes.submissions import router as submissions_router

api_router = APIRouter()
api_router.include_router(forms_router, tags=["Forms"])
api_router.include_router(submissions_router, tags=["Submissions"])
api_router.include_router(clear_router, tags=["Clear"])

__all__ = ["api_router"]
