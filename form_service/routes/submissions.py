"""Submission endpoints.

The request body is taken as raw JSON and validated by
`parse_submission_payload`, so malformed answers arrive as a 400 problem
with a domain code instead of a framework 422.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from form_service.logic.submission_orchestrator import SubmissionOrchestrator
from form_service.models.response_types import FormView, SubmissionRecord, SubmissionView, SubmitResponse
from form_service.models.submission_payload import parse_submission_payload
from form_service.routes.dependencies import get_orchestrator

router = APIRouter()


@router.post(
    "/answer/{form_id}",
    summary="Submit answers for a form",
    status_code=201,
    response_model=SubmitResponse,
)
def submit_answers(
    form_id: str,
    response: Response,
    body: Any = Body(default=None),
    orchestrator: SubmissionOrchestrator = Depends(get_orchestrator),
):
    payload = parse_submission_payload(body)
    result = orchestrator.submit(
        form_id,
        payload.values_by_component(),
        respondent_id=payload.respondent_id,
    )
    response.headers["Location"] = f"/api/form/answers/{result.form_id}/{result.id}"
    return SubmitResponse(submission=SubmissionRecord.model_validate(asdict(result)))


@router.get(
    "/answers/{form_id}/{submission_id}",
    summary="View one submission with its form",
    response_model=SubmissionView,
)
def view_submission(
    form_id: str,
    submission_id: str,
    orchestrator: SubmissionOrchestrator = Depends(get_orchestrator),
):
    detail = orchestrator.view_submission(form_id, submission_id)
    return SubmissionView(
        form=FormView.model_validate(asdict(detail.form)),
        submission=SubmissionRecord.model_validate(asdict(detail.submission)),
    )


__all__ = ["router"]
