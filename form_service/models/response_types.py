"""Pydantic models for response bodies.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ComponentView(_CamelModel):
    id: str
    form_id: str
    type: str
    name: str
    order: int | float
    properties: Dict[str, Any]


class FormView(_CamelModel):
    id: str
    title: str
    user_id: Optional[str] = None
    created_at: str
    status: str
    components: List[ComponentView]


class SubmissionHeader(_CamelModel):
    id: str
    form_id: str
    respondent_id: Optional[str] = None
    submitted_at: str


class SubmissionRecord(SubmissionHeader):
    answers: Dict[str, Any]


class SubmitResponse(_CamelModel):
    submission: SubmissionRecord


class FormEnvelope(_CamelModel):
    form: FormView


class SubmissionView(_CamelModel):
    form: FormView
    submission: SubmissionRecord


class SubmissionList(_CamelModel):
    form_id: str
    submissions: List[SubmissionHeader]


class ClearResult(_CamelModel):
    form_id: str
    cleared_values: Dict[str, Any]


__all__ = [
    "ComponentView",
    "FormView",
    "SubmissionHeader",
    "SubmissionRecord",
    "SubmitResponse",
    "FormEnvelope",
    "SubmissionView",
    "SubmissionList",
    "ClearResult",
]
