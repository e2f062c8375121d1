"""Persistence contracts consumed by the submission orchestrator.

Two implementations exist: `repository_sql.SqlFormStore` (SQLAlchemy,
PostgreSQL or SQLite) and `inmemory_state.InMemoryFormStore`. Which one a
running service uses is decided once by configuration in `build_form_store`;
the orchestrator only ever sees these protocols.

Rows are plain dicts using storage column names (``form_id``, ``user_id``,
``created_at``); ids are returned as canonical strings.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Protocol


class FormTransaction(Protocol):
    """Operations available inside one checked-out transaction."""

    def list_components(self, form_id: str) -> list[dict[str, Any]]: ...

    def upsert_user_by_id(self, user_id: str, handle: str) -> None: ...

    def create_user(self, handle: str) -> str: ...

    def insert_submission(self, form_id: str, user_id: str) -> dict[str, Any]: ...

    def insert_answer(self, component_id: str, submission_id: str, properties: dict[str, Any]) -> None: ...

    def delete_answers_for_form(self, form_id: str) -> int: ...

    def delete_submissions_for_form(self, form_id: str) -> int: ...


class FormStore(Protocol):
    def get_form(self, form_id: str) -> dict[str, Any] | None: ...

    def list_components(self, form_id: str) -> list[dict[str, Any]]: ...

    def list_submissions(self, form_id: str) -> list[dict[str, Any]]: ...

    def get_submission(self, form_id: str, submission_id: str) -> dict[str, Any] | None: ...

    def list_answers(self, submission_id: str) -> list[dict[str, Any]]: ...

    def transaction(self) -> AbstractContextManager[FormTransaction]:
        """Check out a connection, begin, and yield a `FormTransaction`.

        Commits on normal exit; rolls back and re-raises on any exception;
        releases the connection on every path.
        """
        ...

    def ping(self) -> bool: ...


def build_form_store(config: Any) -> FormStore:
    """Select the store implementation named by ``config.store.backend``."""
    backend = config.store.backend
    if backend == "memory":
        from form_service.logic.id_generation import build_id_generator
        from form_service.logic.inmemory_state import InMemoryFormStore

        return InMemoryFormStore(id_generator=build_id_generator(config.store.id_strategy))
    if backend == "sql":
        from form_service.db.base import get_engine
        from form_service.logic.repository_sql import SqlFormStore

        return SqlFormStore(get_engine(config.database.dsn))
    raise ValueError(f"unknown store backend: {backend}")


__all__ = ["FormTransaction", "FormStore", "build_form_store"]
