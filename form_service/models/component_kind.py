"""Component type enumerations.

Plain constants containers (not Enums) so raw strings from storage compare
directly without conversion.
"""

from __future__ import annotations


class StructuralType:
    """Coarse component types a stored component row may declare."""

    INPUT = "input"
    LABEL = "label"
    IMAGE = "image"
    TABLE = "table"

    ALL = frozenset({INPUT, LABEL, IMAGE, TABLE})
    DEFAULT = INPUT


class ComponentKind:
    """Effective kinds the answer validator has rules for."""

    TEXT = "text"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    SELECT = "select"
    DATETIME = "datetime"
    FILE = "file"
    BUTTON = "button"

    # Non-input kinds accept whatever the client sends
    PASSTHROUGH = frozenset({StructuralType.LABEL, StructuralType.IMAGE, StructuralType.TABLE})

    # HTML input flavours folded onto the fixed rule kinds
    ALIASES = {
        "email": TEXT,
        "tel": TEXT,
        "url": TEXT,
        "password": TEXT,
        "search": TEXT,
        "textarea": TEXT,
        "range": NUMBER,
        "date": DATETIME,
        "datetime-local": DATETIME,
        "submit": BUTTON,
        "reset": BUTTON,
    }


__all__ = ["StructuralType", "ComponentKind"]
