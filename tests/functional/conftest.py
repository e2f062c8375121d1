"""Functional test bootstrap for the HTTP API.

The app under test is built from environment configuration and points at a
file-backed SQLite database under tmp/. SQLite migrations are applied once
per session before any TestClient is created; startup auto-migration is off
so the session fixture owns the schema.
"""

from __future__ import annotations

import os
import pathlib

import pytest
from fastapi.testclient import TestClient

_ROOT = pathlib.Path(__file__).resolve().parents[2]
_DB_FILE = _ROOT / "tmp" / "functional_tests.db"
_DB_FILE.parent.mkdir(parents=True, exist_ok=True)
if _DB_FILE.exists():
    _DB_FILE.unlink()

os.environ["DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
os.environ["FORM_STORE_BACKEND"] = "sql"
os.environ["AUTO_APPLY_MIGRATIONS"] = "0"


@pytest.fixture(scope="session")
def db_engine():
    from form_service.db.base import get_engine

    return get_engine(os.environ["DATABASE_URL"])


@pytest.fixture(scope="session", autouse=True)
def functional_sqlite_bootstrap(db_engine):
    """Session-level bootstrap: apply migrations once for the shared DB."""
    from form_service.db.migrations_runner import apply_migrations

    apply_migrations(db_engine)
    yield
    from form_service.db.base import dispose_engines

    dispose_engines()


@pytest.fixture
def client():
    from form_service.logic.events import get_buffered_events
    from form_service.main import create_app

    get_buffered_events(clear=True)
    with TestClient(create_app(enable_test_support=True)) as c:
        yield c
