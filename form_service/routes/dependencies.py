"""FastAPI dependencies shared by the form routes."""

from __future__ import annotations

from fastapi import Request

from form_service.logic.submission_orchestrator import SubmissionOrchestrator


def get_orchestrator(request: Request) -> SubmissionOrchestrator:
    return request.app.state.orchestrator


__all__ = ["get_orchestrator"]
