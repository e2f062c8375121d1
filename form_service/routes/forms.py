"""Read endpoints for answerable forms and their submissions."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from form_service.logic.submission_orchestrator import SubmissionOrchestrator
from form_service.models.response_types import FormEnvelope, FormView, SubmissionHeader, SubmissionList
from form_service.routes.dependencies import get_orchestrator

router = APIRouter()


@router.get(
    "/answer/{form_id}",
    summary="Load a form with its components in answering order",
    response_model=FormEnvelope,
)
def load_answerable_form(form_id: str, orchestrator: SubmissionOrchestrator = Depends(get_orchestrator)):
    snapshot = orchestrator.load_form(form_id)
    return FormEnvelope(form=FormView.model_validate(asdict(snapshot)))


@router.get(
    "/{form_id}/submissions",
    summary="List a form's submissions, oldest first",
    response_model=SubmissionList,
)
def list_form_submissions(form_id: str, orchestrator: SubmissionOrchestrator = Depends(get_orchestrator)):
    summaries = orchestrator.list_submissions(form_id)
    return SubmissionList(
        form_id=str(form_id).strip(),
        submissions=[SubmissionHeader.model_validate(asdict(s)) for s in summaries],
    )


__all__ = ["router"]
