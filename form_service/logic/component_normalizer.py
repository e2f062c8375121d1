"""Component schema normalization.

Converts raw component records (database rows, seeded fixtures, request
bodies) into canonical `ComponentDescriptor` objects:

- ``type`` is one of the structural types; anything else becomes ``input``
  and the original token is kept under ``properties["inputType"]``.
- ``order`` comes from the top-level ``order`` field, then
  ``properties.order``, then ``properties.orderBy``; when none is numeric the
  zero-based position in the source list is used.
- ``properties`` is the legacy ``settings`` bag overlaid with ``properties``.

The effective kind used for validation is resolved through an ordered list of
property keys (`KIND_FALLBACK_KEYS`), then the nested ``input.type`` of the
older schema, then the descriptor type itself.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from form_service.logic.identifiers import id_sort_key
from form_service.models.component_kind import ComponentKind, StructuralType

KIND_FALLBACK_KEYS: tuple[str, ...] = ("inputType", "fieldType", "type", "kind", "variant")


@dataclass
class ComponentDescriptor:
    id: str
    form_id: str
    type: str
    name: str
    order: int | float
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> str:
        return resolve_effective_kind(self)

    @property
    def label(self) -> str:
        return self.name or self.id

    def fingerprint(self) -> str:
        """Stable digest input for detecting schema changes between reads."""
        return json.dumps(
            {"type": self.type, "order": self.order, "properties": self.properties},
            sort_keys=True,
            default=str,
        )


def _as_order(candidate: Any) -> int | float | None:
    if isinstance(candidate, bool):
        return None
    if isinstance(candidate, (int, float)):
        number = candidate
    elif isinstance(candidate, str) and candidate.strip():
        try:
            number = float(candidate.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    if float(number).is_integer():
        return int(number)
    return number


def _merge_properties(raw: Mapping[str, Any]) -> dict[str, Any]:
    settings = raw.get("settings")
    properties = raw.get("properties")
    merged: dict[str, Any] = {}
    if isinstance(settings, Mapping):
        merged.update(settings)
    if isinstance(properties, Mapping):
        merged.update(properties)
    return merged


def _canonical_kind(token: str) -> str:
    lowered = token.strip().lower()
    return ComponentKind.ALIASES.get(lowered, lowered)


def resolve_effective_kind(component: ComponentDescriptor) -> str:
    props = component.properties
    for key in KIND_FALLBACK_KEYS:
        candidate = props.get(key)
        if isinstance(candidate, str) and candidate.strip():
            return _canonical_kind(candidate)
    nested = props.get("input")
    if isinstance(nested, Mapping):
        candidate = nested.get("type")
        if isinstance(candidate, str) and candidate.strip():
            return _canonical_kind(candidate)
    return _canonical_kind(component.type)


def normalize_component(raw: Any, position: int = 0) -> ComponentDescriptor:
    """Build a fully populated descriptor from an arbitrary record."""
    obj: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    properties = _merge_properties(obj)

    raw_type = obj.get("type")
    if isinstance(raw_type, str) and raw_type.strip().lower() in StructuralType.ALL:
        resolved_type = raw_type.strip().lower()
    else:
        resolved_type = StructuralType.DEFAULT
        if isinstance(raw_type, str) and raw_type.strip() and "inputType" not in properties:
            properties["inputType"] = raw_type.strip()

    order = None
    for candidate in (obj.get("order"), properties.get("order"), properties.get("orderBy")):
        order = _as_order(candidate)
        if order is not None:
            break
    if order is None:
        order = position

    raw_id = obj.get("id")
    raw_form_id = obj.get("form_id", obj.get("formId"))
    name = obj.get("name")
    return ComponentDescriptor(
        id="" if raw_id is None else str(raw_id),
        form_id="" if raw_form_id is None else str(raw_form_id),
        type=resolved_type,
        name=name if isinstance(name, str) else "",
        order=order,
        properties=properties,
    )


def sort_components(components: Iterable[ComponentDescriptor]) -> list[ComponentDescriptor]:
    return sorted(components, key=lambda c: (c.order, id_sort_key(c.id)))


def normalize_components(rows: Iterable[Any]) -> list[ComponentDescriptor]:
    """Normalize rows in source order and return them in canonical order."""
    return sort_components(normalize_component(row, index) for index, row in enumerate(rows))


__all__ = [
    "KIND_FALLBACK_KEYS",
    "ComponentDescriptor",
    "normalize_component",
    "normalize_components",
    "resolve_effective_kind",
    "sort_components",
]
