"""Lightweight SQL migrations runner.

Applies .sql files in lexical order from the dialect's migration directory
(`migrations/` for PostgreSQL, `sqlite_migrations/` for SQLite, both beside
this module). Skips rollback files and records applied filenames in a
``schema_migrations`` table so each database carries its own journal.
Production deployments may use their platform's migration mechanism instead.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

MIGRATIONS_ROOT = Path(__file__).resolve().parent


def migrations_dir_for(engine: Engine) -> Path:
    if engine.dialect.name == "sqlite":
        return MIGRATIONS_ROOT / "sqlite_migrations"
    return MIGRATIONS_ROOT / "migrations"


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        # Skip rollback scripts in forward runs
        if "rollback" in p.name.lower():
            continue
        yield p


def _exec_sql_compat(conn: Connection, sql: str) -> None:
    """Execute SQL text, tolerating multi-statement files on SQLite.

    SQLite's DB-API (pysqlite) does not allow multiple statements in a single
    execute() call, so files are split on ';' there after dropping comment
    lines. Other dialects receive the full script as-is.
    """
    if conn.dialect.name != "sqlite":
        conn.exec_driver_sql(sql)
        return
    body = "\n".join(line for line in sql.splitlines() if not line.strip().startswith("--"))
    for stmt in body.split(";"):
        s = stmt.strip()
        if not s or s.upper() in {"BEGIN", "COMMIT", "END"}:
            continue
        conn.exec_driver_sql(s)


def apply_migrations(engine: Engine, migrations_dir: str | os.PathLike[str] | None = None) -> list[str]:
    """Apply pending migrations; return the filenames applied by this call."""
    root = Path(migrations_dir) if migrations_dir is not None else migrations_dir_for(engine)
    if not root.exists():
        logger.warning("migrations directory missing path=%s", root)
        return []

    applied_now: list[str] = []
    with engine.begin() as conn:
        conn.execute(
            sql_text(
                "CREATE TABLE IF NOT EXISTS schema_migrations ("
                "filename TEXT PRIMARY KEY, applied_at TEXT NOT NULL)"
            )
        )
        applied = {row[0] for row in conn.execute(sql_text("SELECT filename FROM schema_migrations"))}
        for sql_path in _iter_sql_files(root):
            fname = sql_path.name
            if fname in applied:
                continue
            sql = sql_path.read_text(encoding="utf-8")
            if not sql.strip():
                continue
            _exec_sql_compat(conn, sql)
            conn.execute(
                sql_text("INSERT INTO schema_migrations (filename, applied_at) VALUES (:f, :at)"),
                {
                    "f": fname,
                    # ISO-8601 UTC without fractional seconds (e.g., 2024-01-01T00:00:00Z)
                    "at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
                },
            )
            logger.info("migration_applied file=%s dialect=%s", fname, conn.dialect.name)
            applied_now.append(fname)
    return applied_now
