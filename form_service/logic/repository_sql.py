"""SQL-backed form store.

Plain SQL through SQLAlchemy Core so the same statements run on PostgreSQL
(production) and SQLite (local development and tests). JSON columns are
``jsonb`` on PostgreSQL and text on SQLite; `_json_param` picks the bind
expression per dialect.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from form_service.db.base import transaction
from form_service.logic.answer_canonical import load_json_column
from form_service.logic.id_generation import IdGenerator, UuidIdGenerator

logger = logging.getLogger(__name__)


def _json_param(conn: Connection, name: str) -> str:
    if (getattr(conn.dialect, "name", "") or "").lower() == "postgresql":
        return f"CAST(:{name} AS JSONB)"
    return f":{name}"


def _str_or_none(value: Any) -> str | None:
    return None if value is None else str(value)


def _select_components(conn: Connection, form_id: str) -> list[dict[str, Any]]:
    # Authoring order by id; canonical ordering is the normalizer's job
    rows = conn.execute(
        sql_text(
            """
            SELECT id, form_id, type, name, properties, settings
            FROM components
            WHERE form_id = :form_id
            ORDER BY id ASC
            """
        ),
        {"form_id": int(form_id)},
    ).mappings().all()
    result: list[dict[str, Any]] = []
    for r in rows:
        result.append(
            {
                "id": str(r["id"]),
                "form_id": str(r["form_id"]),
                "type": r["type"],
                "name": r["name"],
                "properties": load_json_column(r["properties"]),
                "settings": load_json_column(r["settings"]),
            }
        )
    return result


class SqlTransaction:
    def __init__(self, conn: Connection, respondent_id_generator: IdGenerator) -> None:
        self._conn = conn
        self._respondent_id_generator = respondent_id_generator

    def list_components(self, form_id: str) -> list[dict[str, Any]]:
        return _select_components(self._conn, form_id)

    def upsert_user_by_id(self, user_id: str, handle: str) -> None:
        self._conn.execute(
            sql_text(
                """
                INSERT INTO users (id, username, created_at)
                VALUES (:id, :username, :created_at)
                ON CONFLICT (id) DO NOTHING
                """
            ),
            {
                "id": user_id,
                "username": handle,
                "created_at": datetime.now(timezone.utc).isoformat(),
            },
        )

    def create_user(self, handle: str) -> str:
        user_id = self._respondent_id_generator()
        self._conn.execute(
            sql_text(
                "INSERT INTO users (id, username, created_at) VALUES (:id, :username, :created_at)"
            ),
            {
                "id": user_id,
                "username": handle,
                "created_at": datetime.now(timezone.utc).isoformat(),
            },
        )
        return user_id

    def insert_submission(self, form_id: str, user_id: str) -> dict[str, Any]:
        created_at = datetime.now(timezone.utc)
        submission_id = self._conn.execute(
            sql_text(
                """
                INSERT INTO submissions (form_id, user_id, created_at)
                VALUES (:form_id, :user_id, :created_at)
                RETURNING id
                """
            ),
            {"form_id": int(form_id), "user_id": user_id, "created_at": created_at.isoformat()},
        ).scalar_one()
        return {
            "id": str(submission_id),
            "form_id": form_id,
            "user_id": user_id,
            "created_at": created_at,
        }

    def insert_answer(self, component_id: str, submission_id: str, properties: dict[str, Any]) -> None:
        self._conn.execute(
            sql_text(
                f"""
                INSERT INTO answers (component_id, submission_id, properties)
                VALUES (:component_id, :submission_id, {_json_param(self._conn, "properties")})
                """
            ),
            {
                "component_id": int(component_id),
                "submission_id": int(submission_id),
                "properties": json.dumps(properties),
            },
        )

    def delete_answers_for_form(self, form_id: str) -> int:
        result = self._conn.execute(
            sql_text(
                """
                DELETE FROM answers
                WHERE submission_id IN (SELECT id FROM submissions WHERE form_id = :form_id)
                """
            ),
            {"form_id": int(form_id)},
        )
        return int(result.rowcount or 0)

    def delete_submissions_for_form(self, form_id: str) -> int:
        result = self._conn.execute(
            sql_text("DELETE FROM submissions WHERE form_id = :form_id"),
            {"form_id": int(form_id)},
        )
        return int(result.rowcount or 0)


class SqlFormStore:
    def __init__(self, engine: Engine, respondent_id_generator: IdGenerator | None = None) -> None:
        self._engine = engine
        self._respondent_id_generator = respondent_id_generator or UuidIdGenerator()

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_form(self, form_id: str) -> dict[str, Any] | None:
        with self._engine.connect() as conn:
            row = conn.execute(
                sql_text(
                    "SELECT id, title, user_id, created_at, status FROM forms WHERE id = :id"
                ),
                {"id": int(form_id)},
            ).mappings().fetchone()
        if row is None:
            return None
        return {
            "id": str(row["id"]),
            "title": row["title"],
            "user_id": _str_or_none(row["user_id"]),
            "created_at": row["created_at"],
            "status": row["status"],
        }

    def list_components(self, form_id: str) -> list[dict[str, Any]]:
        with self._engine.connect() as conn:
            return _select_components(conn, form_id)

    def list_submissions(self, form_id: str) -> list[dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                sql_text(
                    """
                    SELECT id, form_id, user_id, created_at
                    FROM submissions
                    WHERE form_id = :form_id
                    ORDER BY id ASC
                    """
                ),
                {"form_id": int(form_id)},
            ).mappings().all()
        return [
            {
                "id": str(r["id"]),
                "form_id": str(r["form_id"]),
                "user_id": _str_or_none(r["user_id"]),
                "created_at": r["created_at"],
            }
            for r in rows
        ]

    def get_submission(self, form_id: str, submission_id: str) -> dict[str, Any] | None:
        with self._engine.connect() as conn:
            row = conn.execute(
                sql_text(
                    """
                    SELECT id, form_id, user_id, created_at
                    FROM submissions
                    WHERE id = :id AND form_id = :form_id
                    """
                ),
                {"id": int(submission_id), "form_id": int(form_id)},
            ).mappings().fetchone()
        if row is None:
            return None
        return {
            "id": str(row["id"]),
            "form_id": str(row["form_id"]),
            "user_id": _str_or_none(row["user_id"]),
            "created_at": row["created_at"],
        }

    def list_answers(self, submission_id: str) -> list[dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                sql_text(
                    "SELECT component_id, submission_id, properties FROM answers WHERE submission_id = :sid"
                ),
                {"sid": int(submission_id)},
            ).mappings().all()
        return [
            {
                "component_id": str(r["component_id"]),
                "submission_id": str(r["submission_id"]),
                "properties": load_json_column(r["properties"]),
            }
            for r in rows
        ]

    @contextmanager
    def transaction(self) -> Iterator[SqlTransaction]:
        with transaction(self._engine) as conn:
            yield SqlTransaction(conn, self._respondent_id_generator)

    def ping(self) -> bool:
        try:
            with self._engine.connect() as conn:
                conn.execute(sql_text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.error("form store ping failed", exc_info=True)
            return False


__all__ = ["SqlFormStore", "SqlTransaction"]
