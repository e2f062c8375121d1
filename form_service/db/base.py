"""SQLAlchemy engine cache and transaction boundary.

The service targets PostgreSQL in production but supports SQLite for local
development and CI. No declarative models are defined here; this module only
manages connection lifecycle.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///:memory:"

# One Engine (and pool) per URL for the life of the process
_ENGINES: dict[str, Engine] = {}


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(url: str | None = None) -> Engine:
    """Return the cached SQLAlchemy Engine for ``url``.

    For SQLite in-memory URLs, use a StaticPool to keep a single connection
    alive across sessions and threads, otherwise each checkout would see an
    empty database.
    """
    resolved_url = url or DEFAULT_DATABASE_URL
    engine = _ENGINES.get(resolved_url)
    if engine is None:
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        if resolved_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in resolved_url:
                kwargs["poolclass"] = StaticPool
        engine = create_engine(resolved_url, **kwargs)
        if engine.dialect.name == "sqlite":
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        _ENGINES[resolved_url] = engine
    return engine


def dispose_engines() -> None:
    for engine in _ENGINES.values():
        engine.dispose()
    _ENGINES.clear()


@contextmanager
def transaction(engine: Engine) -> Iterator[Connection]:
    """Check out a connection and run one transaction on it.

    Commit on normal exit, roll back and re-raise on any exception, and
    always return the connection to the pool.
    """
    conn = engine.connect()
    try:
        trans = conn.begin()
        try:
            yield conn
            trans.commit()
        except Exception:
            trans.rollback()
            logger.error("DB transaction error; transaction rolled back", exc_info=True)
            raise
    finally:
        conn.close()
