"""Helpers for submission write operations."""

from __future__ import annotations

import secrets
import time
from datetime import datetime, timezone


def format_created_at(dt: datetime | str | None = None) -> str:
    """Format an RFC3339 UTC timestamp with trailing 'Z'.

    Accepts datetimes from PostgreSQL and ISO text from SQLite; naive values
    are taken as UTC.
    """
    if isinstance(dt, str):
        dt = datetime.fromisoformat(dt.strip().replace("Z", "+00:00").replace(" ", "T", 1))
    base = dt or datetime.now(timezone.utc)
    if base.tzinfo is None:
        base = base.replace(tzinfo=timezone.utc)
    return base.astimezone(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def respondent_handle(respondent_id: str) -> str:
    return f"respondent_{respondent_id[:8]}"


def generated_respondent_handle() -> str:
    return f"respondent_{int(time.time() * 1000)}_{secrets.token_hex(6)}"


__all__ = ["format_created_at", "respondent_handle", "generated_respondent_handle"]
