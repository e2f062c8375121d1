"""Submission, clear and read flows over a `FormStore`.

Every answer is validated before the transaction opens. Inside the
transaction the components are read again; if the schema moved since the
first read the answers are re-checked against the fresh schema, so a
rejection there rolls the whole submission back. Domain errors propagate
unchanged; anything else raised after begin is logged and surfaced as
`PersistenceError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from form_service.logic.answer_canonical import decode_answer_properties, encode_answer_properties
from form_service.logic.answer_validator import MISSING, validate_answer
from form_service.logic.component_normalizer import ComponentDescriptor, normalize_components
from form_service.logic.default_values import build_cleared_values
from form_service.logic.errors import (
    AnswerRejectedError,
    EmptyFormError,
    FormNotFoundError,
    FormServiceError,
    PersistenceError,
    SubmissionNotFoundError,
    UnknownComponentError,
)
from form_service.logic.events import FORM_CLEARED, SUBMISSION_CREATED, publish
from form_service.logic.identifiers import canonical_id, id_sort_key
from form_service.logic.repositories import FormStore, FormTransaction
from form_service.logic.submissions_write import (
    format_created_at,
    generated_respondent_handle,
    respondent_handle,
)

logger = logging.getLogger(__name__)


@dataclass
class FormSnapshot:
    id: str
    title: str
    user_id: str | None
    created_at: str
    status: str
    components: list[ComponentDescriptor] = field(default_factory=list)


@dataclass
class SubmissionSummary:
    id: str
    form_id: str
    respondent_id: str | None
    submitted_at: str


@dataclass
class SubmissionResult(SubmissionSummary):
    answers: dict[str, Any] = field(default_factory=dict)


@dataclass
class SubmissionDetail:
    form: FormSnapshot
    submission: SubmissionResult


@dataclass
class ClearOutcome:
    form_id: str
    cleared_values: dict[str, Any]
    submissions_deleted: int = 0
    answers_deleted: int = 0


def _answerable(rows: Iterable[Mapping[str, Any]]) -> list[ComponentDescriptor]:
    components = []
    for component in normalize_components(rows):
        if not component.id:
            logger.warning("component_skipped reason=missing_id form_id=%s", component.form_id)
            continue
        components.append(component)
    return components


def _fingerprints(components: Iterable[ComponentDescriptor]) -> dict[str, str]:
    return {c.id: c.fingerprint() for c in components}


def _validate_all(
    components: list[ComponentDescriptor], raw_values: Mapping[str, Any]
) -> dict[str, Any]:
    """Return ``{component id: canonical value}`` in canonical component order."""
    known = {c.id for c in components}
    for component_id in raw_values:
        if component_id not in known:
            raise UnknownComponentError(component_id)

    accepted: dict[str, Any] = {}
    for component in components:
        outcome = validate_answer(component, raw_values.get(component.id, MISSING))
        if not outcome.accepted:
            raise AnswerRejectedError(outcome.reason or "Invalid answer.", component_id=component.id)
        if outcome.has_value:
            accepted[component.id] = outcome.value
    return accepted


def _summary(row: Mapping[str, Any]) -> SubmissionSummary:
    return SubmissionSummary(
        id=str(row["id"]),
        form_id=str(row["form_id"]),
        respondent_id=None if row.get("user_id") is None else str(row["user_id"]),
        submitted_at=format_created_at(row.get("created_at")),
    )


class SubmissionOrchestrator:
    def __init__(self, store: FormStore) -> None:
        self._store = store

    def _require_form(self, form_id: str) -> dict[str, Any]:
        form = self._store.get_form(form_id)
        if form is None:
            raise FormNotFoundError(form_id)
        return form

    def load_form(self, form_id: Any) -> FormSnapshot:
        """Form metadata plus its components in canonical order."""
        fid = canonical_id(form_id, "form ID")
        form = self._require_form(fid)
        return FormSnapshot(
            id=str(form["id"]),
            title=form.get("title") or "",
            user_id=None if form.get("user_id") is None else str(form["user_id"]),
            created_at=format_created_at(form.get("created_at")),
            status=form.get("status") or "draft",
            components=_answerable(self._store.list_components(fid)),
        )

    def _resolve_respondent(self, tx: FormTransaction, respondent_id: str | None) -> str:
        if respondent_id:
            tx.upsert_user_by_id(respondent_id, respondent_handle(respondent_id))
            return respondent_id
        return tx.create_user(generated_respondent_handle())

    def submit(
        self, form_id: Any, raw_values: Mapping[str, Any], respondent_id: str | None = None
    ) -> SubmissionResult:
        """Validate and persist one submission atomically.

        ``raw_values`` maps canonical component ids to the values the client
        sent; components it does not mention are validated as missing.
        """
        fid = canonical_id(form_id, "form ID")
        self._require_form(fid)
        components = _answerable(self._store.list_components(fid))
        if not components:
            raise EmptyFormError(fid)
        accepted = _validate_all(components, raw_values)
        expected = _fingerprints(components)

        try:
            with self._store.transaction() as tx:
                fresh = _answerable(tx.list_components(fid))
                if _fingerprints(fresh) != expected:
                    logger.warning("schema_drift form_id=%s revalidating=true", fid)
                    if not fresh:
                        raise EmptyFormError(fid)
                    accepted = _validate_all(fresh, raw_values)
                    components = fresh
                kinds = {c.id: c.kind for c in components}

                user_id = self._resolve_respondent(tx, respondent_id)
                header = tx.insert_submission(fid, user_id)
                for component_id, value in accepted.items():
                    tx.insert_answer(
                        component_id,
                        str(header["id"]),
                        encode_answer_properties(value, kinds[component_id]),
                    )
        except FormServiceError:
            raise
        except Exception as exc:
            logger.error("submission_failed form_id=%s", fid, exc_info=True)
            raise PersistenceError("Failed to submit form.") from exc

        summary = _summary(header)
        result = SubmissionResult(**vars(summary), answers=accepted)
        logger.info(
            "submission_created form_id=%s submission_id=%s answers=%s",
            fid,
            result.id,
            len(accepted),
        )
        publish(
            SUBMISSION_CREATED,
            {
                "form_id": fid,
                "submission_id": result.id,
                "respondent_id": result.respondent_id,
                "answer_count": len(accepted),
            },
        )
        return result

    def list_submissions(self, form_id: Any) -> list[SubmissionSummary]:
        fid = canonical_id(form_id, "form ID")
        self._require_form(fid)
        rows = self._store.list_submissions(fid)
        return [_summary(row) for row in sorted(rows, key=lambda r: id_sort_key(str(r["id"])))]

    def view_submission(self, form_id: Any, submission_id: Any) -> SubmissionDetail:
        """Rebuild a submission with its form for display."""
        sid = canonical_id(submission_id, "submission ID")
        snapshot = self.load_form(form_id)
        row = self._store.get_submission(snapshot.id, sid)
        if row is None:
            raise SubmissionNotFoundError(snapshot.id, sid)

        stored = {
            str(a["component_id"]): decode_answer_properties(a["properties"])
            for a in self._store.list_answers(sid)
        }
        answers: dict[str, Any] = {}
        for component in snapshot.components:
            if component.id in stored:
                answers[component.id] = stored.pop(component.id)
        for component_id in sorted(stored, key=id_sort_key):
            answers[component_id] = stored[component_id]

        summary = _summary(row)
        return SubmissionDetail(
            form=snapshot,
            submission=SubmissionResult(**vars(summary), answers=answers),
        )

    def clear(self, form_id: Any) -> ClearOutcome:
        """Delete every submission of a form and report each component's default."""
        fid = canonical_id(form_id, "form ID")
        self._require_form(fid)
        try:
            with self._store.transaction() as tx:
                components = _answerable(tx.list_components(fid))
                answers_deleted = tx.delete_answers_for_form(fid)
                submissions_deleted = tx.delete_submissions_for_form(fid)
        except FormServiceError:
            raise
        except Exception as exc:
            logger.error("clear_failed form_id=%s", fid, exc_info=True)
            raise PersistenceError("Failed to clear form answers.") from exc

        outcome = ClearOutcome(
            form_id=fid,
            cleared_values=build_cleared_values(components),
            submissions_deleted=submissions_deleted,
            answers_deleted=answers_deleted,
        )
        logger.info(
            "form_cleared form_id=%s submissions=%s answers=%s",
            fid,
            submissions_deleted,
            answers_deleted,
        )
        publish(
            FORM_CLEARED,
            {
                "form_id": fid,
                "submissions_deleted": submissions_deleted,
                "answers_deleted": answers_deleted,
            },
        )
        return outcome


__all__ = [
    "SubmissionOrchestrator",
    "FormSnapshot",
    "SubmissionSummary",
    "SubmissionResult",
    "SubmissionDetail",
    "ClearOutcome",
]
