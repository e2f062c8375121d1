"""Typed rule variants parsed from a component's property bag.

The validator never probes the raw ``properties`` mapping; `parse_rules`
reads it once and returns one of the frozen dataclasses below, chosen by
the component's effective kind. Malformed constraint values (a ``min`` that
is not numeric, a ``maxSelections`` of ``"lots"``) are treated as absent.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Mapping

from form_service.logic.component_normalizer import ComponentDescriptor
from form_service.models.component_kind import ComponentKind


@dataclass(frozen=True)
class ComponentRules:
    kind: str
    label: str
    required: bool


@dataclass(frozen=True)
class TextRules(ComponentRules):
    min_length: int | None = None
    max_length: int | None = None


@dataclass(frozen=True)
class NumberRules(ComponentRules):
    min: float | None = None
    max: float | None = None
    step: float | None = None


@dataclass(frozen=True)
class OptionRules(ComponentRules):
    options: tuple[str, ...] | None = None
    multiple: bool = False
    max_selections: int | None = None


@dataclass(frozen=True)
class DateRules(ComponentRules):
    min: datetime | None = None
    max: datetime | None = None
    min_text: str | None = None
    max_text: str | None = None


@dataclass(frozen=True)
class FileRules(ComponentRules):
    max_size_mb: float | None = None
    accept_extensions: tuple[str, ...] = ()


@dataclass(frozen=True)
class ButtonRules(ComponentRules):
    pass


@dataclass(frozen=True)
class PassthroughRules(ComponentRules):
    pass


@dataclass(frozen=True)
class UnsupportedRules(ComponentRules):
    pass


def as_number(value: Any) -> float | int | None:
    """Finite int/float or numeric string, else None. Booleans are not numbers."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str) and value.strip():
        token = value.strip()
        try:
            return int(token)
        except ValueError:
            pass
        try:
            number = float(token)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def as_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "on"}
    return False


def _as_count(value: Any) -> int | None:
    number = as_number(value)
    if number is None or number < 0:
        return None
    return int(number)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 or RFC 2822 date-time; naive values are taken as UTC."""
    if not isinstance(value, str) or not value.strip():
        return None
    token = value.strip()
    if token.endswith(("Z", "z")):
        token = token[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(token)
    except ValueError:
        try:
            parsed = parsedate_to_datetime(value.strip())
        except (TypeError, ValueError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def extract_option_values(options: Any) -> tuple[str, ...] | None:
    """Option values from plain strings or ``{label, value}`` objects."""
    if not isinstance(options, (list, tuple)):
        return None
    values: list[str] = []
    for option in options:
        if isinstance(option, str):
            values.append(option)
        elif isinstance(option, Mapping) and isinstance(option.get("value"), str):
            values.append(option["value"])
    return tuple(values) if values else None


def _accept_extensions(accept: Any) -> tuple[str, ...]:
    if isinstance(accept, str):
        tokens = accept.split(",")
    elif isinstance(accept, (list, tuple)):
        tokens = [t for t in accept if isinstance(t, str)]
    else:
        return ()
    # MIME types cannot be checked against an opaque reference
    return tuple(t.strip().lower() for t in tokens if t.strip().startswith("."))


def parse_rules(component: ComponentDescriptor) -> ComponentRules:
    props = component.properties
    kind = component.kind
    base = {"kind": kind, "label": component.label, "required": as_flag(props.get("required"))}

    if kind == ComponentKind.TEXT:
        return TextRules(
            **base,
            min_length=_as_count(props.get("minLength")),
            max_length=_as_count(props.get("maxLength")),
        )
    if kind == ComponentKind.NUMBER:
        step = as_number(props.get("step"))
        return NumberRules(
            **base,
            min=as_number(props.get("min")),
            max=as_number(props.get("max")),
            step=step if step is not None and step > 0 else None,
        )
    if kind in (ComponentKind.CHECKBOX, ComponentKind.RADIO, ComponentKind.SELECT):
        return OptionRules(
            **base,
            options=extract_option_values(props.get("options")),
            multiple=kind == ComponentKind.CHECKBOX
            or (kind == ComponentKind.SELECT and as_flag(props.get("multiple"))),
            max_selections=_as_count(props.get("maxSelections")),
        )
    if kind == ComponentKind.DATETIME:
        min_text = props.get("min") if isinstance(props.get("min"), str) else None
        max_text = props.get("max") if isinstance(props.get("max"), str) else None
        return DateRules(
            **base,
            min=parse_timestamp(min_text),
            max=parse_timestamp(max_text),
            min_text=min_text,
            max_text=max_text,
        )
    if kind == ComponentKind.FILE:
        size = as_number(props.get("maxSizeMb"))
        return FileRules(
            **base,
            max_size_mb=size if size is not None and size > 0 else None,
            accept_extensions=_accept_extensions(props.get("accept")),
        )
    if kind == ComponentKind.BUTTON:
        return ButtonRules(**base)
    if kind in ComponentKind.PASSTHROUGH:
        return PassthroughRules(**base)
    return UnsupportedRules(**base)


__all__ = [
    "ComponentRules",
    "TextRules",
    "NumberRules",
    "OptionRules",
    "DateRules",
    "FileRules",
    "ButtonRules",
    "PassthroughRules",
    "UnsupportedRules",
    "as_number",
    "as_flag",
    "parse_timestamp",
    "extract_option_values",
    "parse_rules",
]
