"""Clear endpoint: delete a form's submissions and report default values."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from form_service.logic.submission_orchestrator import SubmissionOrchestrator
from form_service.models.response_types import ClearResult
from form_service.routes.dependencies import get_orchestrator

router = APIRouter()


@router.post("/clear/{form_id}", summary="Clear all answers of a form", response_model=ClearResult)
def clear_form(form_id: str, orchestrator: SubmissionOrchestrator = Depends(get_orchestrator)):
    outcome = orchestrator.clear(form_id)
    return ClearResult(form_id=outcome.form_id, cleared_values=outcome.cleared_values)


__all__ = ["router"]
