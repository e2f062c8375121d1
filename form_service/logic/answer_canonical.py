"""Canonical storage shape for answer rows.

Answers persist as ``{"value": <canonical value>, "type": <component kind>}``
so a submission can be displayed without re-joining the form.
"""

from __future__ import annotations

import json
from typing import Any, Mapping


def encode_answer_properties(value: Any, component_type: str | None) -> dict[str, Any]:
    return {"value": value, "type": component_type}


def load_json_column(raw: Any) -> Any:
    """Return a JSON column as Python data.

    PostgreSQL drivers hand back decoded objects; SQLite returns text. Corrupt
    text raises ``ValueError`` rather than being read as an empty bag.
    """
    if raw is None:
        return None
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        return json.loads(raw)
    return raw


def decode_answer_properties(stored: Any) -> Any:
    """Recover the answer value from a stored payload.

    - ``value`` key (current shape)
    - ``answer`` key (older rows)
    - otherwise the whole payload
    """
    properties = load_json_column(stored)
    if not isinstance(properties, Mapping):
        return properties
    if "value" in properties:
        return properties["value"]
    if "answer" in properties:
        return properties["answer"]
    return dict(properties)


__all__ = ["encode_answer_properties", "decode_answer_properties", "load_json_column"]
