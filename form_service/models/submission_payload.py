"""Pydantic model for submission request bodies.

Routes accept a raw JSON object and validate it here so that every body
problem surfaces as one `InputShapeError` (400) with a readable reason,
rather than a framework-level 422.
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)

from form_service.logic.errors import InputShapeError
from form_service.logic.identifiers import canonical_id


class AnswerEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    component_id: StrictInt | StrictStr = Field(alias="componentId")
    value: Any = None

    @field_validator("component_id")
    @classmethod
    def component_id_must_be_canonical(cls, v: int | str) -> str:
        return canonical_id(v, "component ID")


class SubmissionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    respondent_id: StrictStr | None = Field(
        default=None,
        validation_alias=AliasChoices("respondentId", "respondent_id"),
    )
    answers: list[AnswerEntry]

    @field_validator("respondent_id")
    @classmethod
    def respondent_id_must_be_non_empty(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not v.strip():
            raise ValueError("respondentId must be a non-empty string")
        return v.strip()

    @field_validator("answers")
    @classmethod
    def answers_must_be_present(cls, v: list[AnswerEntry]) -> list[AnswerEntry]:
        if not v:
            raise ValueError("Provide an array of { componentId, value } entries")
        return v

    @model_validator(mode="after")
    def answers_must_be_unique(self) -> "SubmissionPayload":
        seen: set[str] = set()
        for entry in self.answers:
            if entry.component_id in seen:
                raise ValueError(f"Duplicate answer for component ID {entry.component_id}")
            seen.add(entry.component_id)
        return self

    def values_by_component(self) -> dict[str, Any]:
        return {str(entry.component_id): entry.value for entry in self.answers}


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
        msg = str(err.get("msg", "invalid value")).removeprefix("Value error, ")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def parse_submission_payload(body: Any) -> SubmissionPayload:
    if not isinstance(body, dict):
        raise InputShapeError("Answers payload is required.")
    try:
        return SubmissionPayload.model_validate(body)
    except PydanticValidationError as exc:
        raise InputShapeError(f"Invalid submission payload: {_describe(exc)}") from exc


__all__ = ["AnswerEntry", "SubmissionPayload", "parse_submission_payload"]
