"""Identifier canonicalization.

Forms, components and submissions are addressed by decimal strings of
positive integers. Clients may send JSON integers or digit strings.
"""

from __future__ import annotations

import re
from typing import Any

from form_service.logic.errors import InputShapeError

_ID_RE = re.compile(r"[1-9][0-9]*")

# Signed 64-bit ceiling shared by PostgreSQL BIGINT and SQLite INTEGER
MAX_ID = 2**63 - 1


def canonical_id(value: Any, what: str = "ID") -> str:
    """Return ``value`` as a canonical id string or raise InputShapeError."""
    if isinstance(value, bool):
        raise InputShapeError(f"Invalid {what}.")
    if isinstance(value, int):
        token = str(value)
    elif isinstance(value, str):
        token = value.strip()
    else:
        raise InputShapeError(f"Invalid {what}.")
    if not _ID_RE.fullmatch(token) or int(token) > MAX_ID:
        raise InputShapeError(f"Invalid {what}.")
    return token


def id_sort_key(value: str) -> tuple[int, int, str]:
    """Numeric ordering for digit ids, lexical after them for anything else."""
    if value.isdigit():
        return (0, int(value), "")
    return (1, 0, value)


__all__ = ["MAX_ID", "canonical_id", "id_sort_key"]
