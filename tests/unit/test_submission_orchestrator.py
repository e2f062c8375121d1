"""Behavioural tests for submit, clear and view against the in-memory store."""

from __future__ import annotations

import pytest

from form_service.logic.errors import (
    AnswerRejectedError,
    EmptyFormError,
    FormNotFoundError,
    InputShapeError,
    PersistenceError,
    SubmissionNotFoundError,
    UnknownComponentError,
)
from form_service.logic.events import FORM_CLEARED, SUBMISSION_CREATED, get_buffered_events
from form_service.logic.inmemory_state import InMemoryFormStore, InMemoryTransaction
from form_service.logic.submission_orchestrator import SubmissionOrchestrator


@pytest.fixture
def store() -> InMemoryFormStore:
    get_buffered_events(clear=True)
    return InMemoryFormStore()


@pytest.fixture
def form(store, scenario_components):
    return store.add_form("Staff survey", scenario_components, status="published")


@pytest.fixture
def orchestrator(store) -> SubmissionOrchestrator:
    return SubmissionOrchestrator(store)


def _ids(form):
    return [c["id"] for c in form["components"]]


def _valid_answers(form):
    name, age, dept, interests = _ids(form)
    return {name: "Alice Example", age: 28, dept: "Sales", interests: ["Events"]}


def test_scenario_submission_returns_canonical_answers(orchestrator, store, form):
    answers = _valid_answers(form)

    result = orchestrator.submit(form["id"], answers)

    assert result.form_id == form["id"]
    assert result.answers == answers
    assert result.submitted_at.endswith("Z")
    assert result.respondent_id in store.users
    assert store.users[result.respondent_id]["username"].startswith("respondent_")
    assert [s.id for s in orchestrator.list_submissions(form["id"])] == [result.id]
    stored = {row["component_id"]: row["properties"] for row in store.list_answers(result.id)}
    name_id, age_id = _ids(form)[:2]
    assert stored[name_id] == {"value": "Alice Example", "type": "text"}
    assert stored[age_id] == {"value": 28, "type": "number"}


def test_submission_publishes_created_event(orchestrator, form):
    result = orchestrator.submit(form["id"], _valid_answers(form))

    events = get_buffered_events()
    assert [e["type"] for e in events] == [SUBMISSION_CREATED]
    assert events[0]["payload"]["submission_id"] == result.id
    assert events[0]["payload"]["answer_count"] == 4


def test_empty_required_text_rejects_and_persists_nothing(orchestrator, store, form):
    answers = _valid_answers(form)
    name_id = _ids(form)[0]
    answers[name_id] = ""

    with pytest.raises(AnswerRejectedError) as excinfo:
        orchestrator.submit(form["id"], answers)

    assert excinfo.value.reason == "Component 'Full name' is required."
    assert excinfo.value.component_id == name_id
    assert orchestrator.list_submissions(form["id"]) == []
    assert store.users == {}
    assert store.answers == {}


def test_omitted_required_component_is_caught(orchestrator, form):
    name_id, age_id = _ids(form)[:2]

    with pytest.raises(AnswerRejectedError) as excinfo:
        orchestrator.submit(form["id"], {name_id: "Alice"})

    assert excinfo.value.component_id == age_id


def test_first_rejection_follows_canonical_order(orchestrator, store, scenario_components):
    scenario_components[0]["properties"]["order"] = 5
    form = store.add_form("Reordered", scenario_components)
    name_id, age_id = _ids(form)[:2]

    with pytest.raises(AnswerRejectedError) as excinfo:
        orchestrator.submit(form["id"], {name_id: "", age_id: 7})

    # name moved last, so the age rejection is reported first
    assert excinfo.value.component_id == age_id
    assert excinfo.value.reason == "Number answer cannot be less than 18."


def test_optional_blank_answers_are_not_stored(orchestrator, store, form):
    name_id, age_id, dept_id, _ = _ids(form)

    result = orchestrator.submit(form["id"], {name_id: "Al", age_id: "40", dept_id: "  "})

    assert result.answers == {name_id: "Al", age_id: 40}
    assert len(store.list_answers(result.id)) == 2


def test_unknown_component_reference_rejects_before_mutation(orchestrator, store, form):
    answers = {**_valid_answers(form), "999": "x"}

    with pytest.raises(UnknownComponentError) as excinfo:
        orchestrator.submit(form["id"], answers)

    assert excinfo.value.reason == "Answer references unknown component ID 999."
    assert excinfo.value.component_id == "999"
    assert store.submissions == {}


def test_missing_form_and_empty_form(orchestrator, store):
    with pytest.raises(FormNotFoundError):
        orchestrator.submit("404", {"1": "x"})
    empty = store.add_form("Nothing to answer", [])
    with pytest.raises(EmptyFormError):
        orchestrator.submit(empty["id"], {})


@pytest.mark.parametrize("bad_id", ["abc", "0", "-1", "1.5", "", "9223372036854775808", 2**63])
def test_non_canonical_form_id_is_an_input_shape_error(orchestrator, bad_id):
    with pytest.raises(InputShapeError):
        orchestrator.submit(bad_id, {})


def test_supplied_respondent_is_upserted_once(orchestrator, store, form):
    first = orchestrator.submit(form["id"], _valid_answers(form), respondent_id="user-abcdefghij")
    second = orchestrator.submit(form["id"], _valid_answers(form), respondent_id="user-abcdefghij")

    assert first.respondent_id == second.respondent_id == "user-abcdefghij"
    assert list(store.users) == ["user-abcdefghij"]
    assert store.users["user-abcdefghij"]["username"] == "respondent_user-abc"
    assert [s.id for s in orchestrator.list_submissions(form["id"])] == [first.id, second.id]


def test_failed_answer_insert_rolls_back_everything(orchestrator, store, form, monkeypatch):
    original = InMemoryTransaction.insert_answer
    calls = {"n": 0}

    def flaky_insert(self, component_id, submission_id, properties):
        calls["n"] += 1
        if calls["n"] == 2:
            raise RuntimeError("disk full")
        return original(self, component_id, submission_id, properties)

    monkeypatch.setattr(InMemoryTransaction, "insert_answer", flaky_insert)

    with pytest.raises(PersistenceError) as excinfo:
        orchestrator.submit(form["id"], _valid_answers(form))

    assert excinfo.value.reason == "Failed to submit form."
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert store.submissions == {}
    assert store.answers == {}
    assert store.users == {}
    assert get_buffered_events() == []


def test_schema_change_inside_transaction_is_revalidated(orchestrator, store, form, monkeypatch):
    name_id, age_id, dept_id, _ = _ids(form)
    original = InMemoryTransaction.list_components

    def drifting(self, form_id):
        store.update_component(
            form_id,
            dept_id,
            properties={"inputType": "select", "options": ["Sales"], "required": True},
        )
        return original(self, form_id)

    monkeypatch.setattr(InMemoryTransaction, "list_components", drifting)

    with pytest.raises(AnswerRejectedError) as excinfo:
        orchestrator.submit(form["id"], {name_id: "Alice", age_id: 30})

    assert excinfo.value.component_id == dept_id
    assert excinfo.value.reason == "Component 'Department' is required."
    assert store.submissions == {}


def test_view_round_trips_submitted_values(orchestrator, form):
    answers = _valid_answers(form)
    result = orchestrator.submit(form["id"], answers, respondent_id="r1")

    detail = orchestrator.view_submission(form["id"], result.id)

    assert detail.submission.answers == answers
    assert list(detail.submission.answers) == _ids(form)
    assert detail.submission.respondent_id == "r1"
    assert detail.form.title == "Staff survey"
    assert detail.form.status == "published"
    assert [c.id for c in detail.form.components] == _ids(form)


def test_view_rejects_submission_of_another_form(orchestrator, store, form, scenario_components):
    other = store.add_form("Other", scenario_components)
    result = orchestrator.submit(form["id"], _valid_answers(form))

    with pytest.raises(SubmissionNotFoundError):
        orchestrator.view_submission(other["id"], result.id)
    with pytest.raises(SubmissionNotFoundError):
        orchestrator.view_submission(form["id"], "9999")


def test_view_reads_legacy_answer_payloads(orchestrator, store, form):
    result = orchestrator.submit(form["id"], _valid_answers(form))
    name_id = _ids(form)[0]
    store.answers[(result.id, name_id)]["properties"] = {"answer": "Legacy Name"}

    detail = orchestrator.view_submission(form["id"], result.id)

    assert detail.submission.answers[name_id] == "Legacy Name"


def test_clear_returns_defaults_and_removes_submissions(orchestrator, store, form):
    orchestrator.submit(form["id"], _valid_answers(form))
    orchestrator.submit(form["id"], _valid_answers(form))
    name_id, age_id, dept_id, interests_id = _ids(form)

    outcome = orchestrator.clear(form["id"])

    assert outcome.cleared_values == {
        name_id: "John Doe",
        age_id: 30,
        dept_id: "Marketing",
        interests_id: ["Newsletters"],
    }
    assert outcome.submissions_deleted == 2
    assert outcome.answers_deleted == 8
    assert orchestrator.list_submissions(form["id"]) == []
    assert store.answers == {}
    assert get_buffered_events()[-1]["type"] == FORM_CLEARED


def test_clear_is_idempotent(orchestrator, form):
    orchestrator.submit(form["id"], _valid_answers(form))

    first = orchestrator.clear(form["id"])
    second = orchestrator.clear(form["id"])

    assert first.cleared_values == second.cleared_values
    assert second.submissions_deleted == 0
    assert orchestrator.list_submissions(form["id"]) == []


def test_clear_leaves_other_forms_alone(orchestrator, store, form, scenario_components):
    other = store.add_form("Other", scenario_components)
    kept = orchestrator.submit(other["id"], _valid_answers(other))

    orchestrator.clear(form["id"])

    assert [s.id for s in orchestrator.list_submissions(other["id"])] == [kept.id]


def test_clear_unknown_form(orchestrator):
    with pytest.raises(FormNotFoundError):
        orchestrator.clear("12345")


def test_load_form_returns_sorted_components(orchestrator, store):
    form = store.add_form(
        "Ordered",
        [
            {"type": "input", "name": "Second", "properties": {"inputType": "text", "order": 2}},
            {"type": "label", "name": "Intro", "properties": {"order": 1}},
        ],
    )

    snapshot = orchestrator.load_form(form["id"])

    assert [c.name for c in snapshot.components] == ["Intro", "Second"]
    assert snapshot.created_at.endswith("Z")


def test_failed_clear_keeps_every_submission(orchestrator, store, form, monkeypatch):
    orchestrator.submit(form["id"], _valid_answers(form))

    def broken_delete(self, form_id):
        raise RuntimeError("lock timeout")

    monkeypatch.setattr(InMemoryTransaction, "delete_submissions_for_form", broken_delete)

    with pytest.raises(PersistenceError) as excinfo:
        orchestrator.clear(form["id"])

    assert excinfo.value.reason == "Failed to clear form answers."
    assert len(store.submissions) == 1
    assert len(store.answers) == 4
    assert all(e["type"] != FORM_CLEARED for e in get_buffered_events())
