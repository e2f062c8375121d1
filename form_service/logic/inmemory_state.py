"""In-memory form store for tests and local development.

Holds forms, components, respondents, submissions and answers in
per-instance dictionaries (no module-level globals). Transactions snapshot
the tables on begin and restore them on rollback; a re-entrant lock stands
in for database isolation so concurrent requests do not interleave.

Form authoring is not part of the service surface; `add_form` and
`update_component` are the seeding hooks that play the authoring
collaborator's role.
"""

from __future__ import annotations

import copy
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

from form_service.logic.id_generation import IdGenerator, SequenceIdGenerator, UuidIdGenerator

logger = logging.getLogger(__name__)

_TABLES = ("forms", "components", "users", "submissions", "answers")


class InMemoryTransaction:
    def __init__(self, store: "InMemoryFormStore") -> None:
        self._store = store

    def list_components(self, form_id: str) -> list[dict[str, Any]]:
        return self._store.list_components(form_id)

    def upsert_user_by_id(self, user_id: str, handle: str) -> None:
        self._store.users.setdefault(
            user_id,
            {"id": user_id, "username": handle, "created_at": datetime.now(timezone.utc)},
        )

    def create_user(self, handle: str) -> str:
        user_id = self._store.respondent_id_generator()
        self._store.users[user_id] = {
            "id": user_id,
            "username": handle,
            "created_at": datetime.now(timezone.utc),
        }
        return user_id

    def insert_submission(self, form_id: str, user_id: str) -> dict[str, Any]:
        if form_id not in self._store.forms:
            raise KeyError(f"form {form_id} does not exist")
        if user_id not in self._store.users:
            raise KeyError(f"user {user_id} does not exist")
        row = {
            "id": self._store.id_generator(),
            "form_id": form_id,
            "user_id": user_id,
            "created_at": datetime.now(timezone.utc),
        }
        self._store.submissions[row["id"]] = row
        return dict(row)

    def insert_answer(self, component_id: str, submission_id: str, properties: dict[str, Any]) -> None:
        if submission_id not in self._store.submissions:
            raise KeyError(f"submission {submission_id} does not exist")
        key = (submission_id, component_id)
        if key in self._store.answers:
            raise KeyError(f"duplicate answer for component {component_id}")
        self._store.answers[key] = {
            "component_id": component_id,
            "submission_id": submission_id,
            "properties": copy.deepcopy(properties),
        }

    def delete_answers_for_form(self, form_id: str) -> int:
        submission_ids = {
            sid for sid, row in self._store.submissions.items() if row["form_id"] == form_id
        }
        doomed = [key for key in self._store.answers if key[0] in submission_ids]
        for key in doomed:
            del self._store.answers[key]
        return len(doomed)

    def delete_submissions_for_form(self, form_id: str) -> int:
        doomed = [sid for sid, row in self._store.submissions.items() if row["form_id"] == form_id]
        for sid in doomed:
            del self._store.submissions[sid]
        return len(doomed)


class InMemoryFormStore:
    def __init__(
        self,
        id_generator: IdGenerator | None = None,
        respondent_id_generator: IdGenerator | None = None,
    ) -> None:
        self.id_generator = id_generator or SequenceIdGenerator()
        self.respondent_id_generator = respondent_id_generator or UuidIdGenerator()
        self.forms: dict[str, dict[str, Any]] = {}
        # form_id -> component rows in authoring (insertion) order
        self.components: dict[str, list[dict[str, Any]]] = {}
        self.users: dict[str, dict[str, Any]] = {}
        self.submissions: dict[str, dict[str, Any]] = {}
        # (submission_id, component_id) -> answer row
        self.answers: dict[tuple[str, str], dict[str, Any]] = {}
        self._lock = threading.RLock()

    # Authoring hooks

    def add_form(
        self,
        title: str,
        components: list[dict[str, Any]],
        *,
        user_id: str | None = None,
        status: str = "draft",
    ) -> dict[str, Any]:
        """Create a form with components; returns the form row plus its component rows."""
        with self._lock:
            form_id = self.id_generator()
            form = {
                "id": form_id,
                "title": title,
                "user_id": user_id,
                "created_at": datetime.now(timezone.utc),
                "status": status,
            }
            self.forms[form_id] = form
            rows = []
            for component in components:
                row = copy.deepcopy(component)
                row["id"] = self.id_generator()
                row["form_id"] = form_id
                rows.append(row)
            self.components[form_id] = rows
            return {**form, "components": copy.deepcopy(rows)}

    def update_component(self, form_id: str, component_id: str, **changes: Any) -> None:
        with self._lock:
            for row in self.components.get(form_id, []):
                if str(row["id"]) == component_id:
                    row.update(copy.deepcopy(changes))
                    return
            raise KeyError(f"component {component_id} not found on form {form_id}")

    # FormStore

    def get_form(self, form_id: str) -> dict[str, Any] | None:
        with self._lock:
            form = self.forms.get(form_id)
            return dict(form) if form else None

    def list_components(self, form_id: str) -> list[dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self.components.get(form_id, []))

    def list_submissions(self, form_id: str) -> list[dict[str, Any]]:
        with self._lock:
            rows = [dict(row) for row in self.submissions.values() if row["form_id"] == form_id]
        return sorted(rows, key=lambda r: int(r["id"]) if r["id"].isdigit() else 0)

    def get_submission(self, form_id: str, submission_id: str) -> dict[str, Any] | None:
        with self._lock:
            row = self.submissions.get(submission_id)
            if row is None or row["form_id"] != form_id:
                return None
            return dict(row)

    def list_answers(self, submission_id: str) -> list[dict[str, Any]]:
        with self._lock:
            return [
                copy.deepcopy(row) for key, row in self.answers.items() if key[0] == submission_id
            ]

    @contextmanager
    def transaction(self) -> Iterator[InMemoryTransaction]:
        with self._lock:
            snapshot = {name: copy.deepcopy(getattr(self, name)) for name in _TABLES}
            try:
                yield InMemoryTransaction(self)
            except Exception:
                for name, table in snapshot.items():
                    setattr(self, name, table)
                logger.error("in-memory transaction error; state rolled back", exc_info=True)
                raise

    def ping(self) -> bool:
        return True


__all__ = ["InMemoryFormStore", "InMemoryTransaction"]
