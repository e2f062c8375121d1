"""Behave environment hooks for the form submission scenarios.

Each scenario runs against a fresh app bound to its own in-memory store, so
no database or running server is needed.
"""

from __future__ import annotations

from typing import Any

from fastapi.testclient import TestClient

from form_service.config import AppConfig, StoreConfig
from form_service.logic.events import get_buffered_events
from form_service.logic.inmemory_state import InMemoryFormStore
from form_service.main import create_app


def before_scenario(context: Any, scenario: Any) -> None:  # pragma: no cover - executed by Behave
    get_buffered_events(clear=True)
    context.store = InMemoryFormStore()
    app = create_app(
        config=AppConfig(store=StoreConfig(backend="memory")),
        store=context.store,
        enable_test_support=True,
    )
    context.client = TestClient(app)
    context.client.__enter__()
    context.response = None


def after_scenario(context: Any, scenario: Any) -> None:  # pragma: no cover - executed by Behave
    client = getattr(context, "client", None)
    if client is not None:
        client.__exit__(None, None, None)
