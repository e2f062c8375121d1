"""Cleared-value derivation for reset/clear flows.

Defaults are trusted form configuration and are not run through the answer
validator.
"""

from __future__ import annotations

from typing import Any, Iterable

from form_service.logic.component_normalizer import ComponentDescriptor
from form_service.logic.component_rules import as_flag


def derive_default_value(component: ComponentDescriptor) -> Any:
    props = component.properties
    if "defaultValue" in props:
        return props["defaultValue"]
    if as_flag(props.get("multiple")):
        return []
    return None


def build_cleared_values(components: Iterable[ComponentDescriptor]) -> dict[str, Any]:
    return {component.id: derive_default_value(component) for component in components if component.id}


__all__ = ["derive_default_value", "build_cleared_values"]
