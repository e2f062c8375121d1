"""Fixtures shared by unit and functional tests.

`scenario_components` is the four-question form (name, age, department,
interests) used throughout; every component carries a default so clear can
be checked against it.
"""

from __future__ import annotations

import copy
import json
from typing import Any

import pytest
from sqlalchemy import text as sql_text
from sqlalchemy.engine import Engine

SCENARIO_COMPONENTS: list[dict[str, Any]] = [
    {
        "type": "input",
        "name": "Full name",
        "properties": {
            "inputType": "text",
            "minLength": 2,
            "maxLength": 50,
            "required": True,
            "defaultValue": "John Doe",
        },
    },
    {
        "type": "input",
        "name": "Age",
        "properties": {
            "inputType": "number",
            "min": 18,
            "max": 99,
            "step": 1,
            "required": True,
            "defaultValue": 30,
        },
    },
    {
        "type": "input",
        "name": "Department",
        "properties": {
            "inputType": "select",
            "options": ["Sales", "Marketing", "Support"],
            "defaultValue": "Marketing",
        },
    },
    {
        "type": "input",
        "name": "Interests",
        "properties": {
            "inputType": "checkbox",
            "options": [
                {"label": "Newsletters", "value": "Newsletters"},
                {"label": "Events", "value": "Events"},
                {"label": "Offers", "value": "Offers"},
            ],
            "maxSelections": 2,
            "defaultValue": ["Newsletters"],
        },
    },
]


@pytest.fixture
def scenario_components() -> list[dict[str, Any]]:
    return copy.deepcopy(SCENARIO_COMPONENTS)


def seed_sql_form(
    engine: Engine,
    title: str,
    components: list[dict[str, Any]],
    *,
    status: str = "published",
) -> dict[str, Any]:
    """Insert a form and its components directly; returns ids as strings."""
    with engine.begin() as conn:
        form_id = conn.execute(
            sql_text("INSERT INTO forms (title, status) VALUES (:title, :status) RETURNING id"),
            {"title": title, "status": status},
        ).scalar_one()
        component_ids = []
        for component in components:
            settings = component.get("settings")
            cid = conn.execute(
                sql_text(
                    """
                    INSERT INTO components (form_id, type, name, properties, settings)
                    VALUES (:form_id, :type, :name, :properties, :settings)
                    RETURNING id
                    """
                ),
                {
                    "form_id": form_id,
                    "type": component.get("type", "input"),
                    "name": component.get("name"),
                    "properties": json.dumps(component.get("properties", {})),
                    "settings": json.dumps(settings) if settings is not None else None,
                },
            ).scalar_one()
            component_ids.append(str(cid))
    return {"id": str(form_id), "component_ids": component_ids}


@pytest.fixture
def seed_form():
    return seed_sql_form
