"""Type-aware answer validation.

`validate_answer` maps a canonical component and a raw submitted value to a
`ValidationOutcome`:

- accepted with a canonical value,
- accepted with no value (optional component left blank; not persisted),
- rejected with a human-readable reason.

The module is pure: no I/O, no logging, no HTTP knowledge. Rules come from
`component_rules.parse_rules`, so dispatch happens on typed variants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from form_service.logic.component_normalizer import ComponentDescriptor
from form_service.logic.component_rules import (
    ButtonRules,
    ComponentRules,
    DateRules,
    FileRules,
    NumberRules,
    OptionRules,
    PassthroughRules,
    TextRules,
    as_number,
    parse_rules,
    parse_timestamp,
)

STEP_TOLERANCE = 1e-9
BYTES_PER_MB = 1024 * 1024


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()
"""Marker for an answer the client did not send at all."""


@dataclass(frozen=True)
class ValidationOutcome:
    accepted: bool
    value: Any = MISSING
    reason: str | None = None

    @property
    def has_value(self) -> bool:
        return self.accepted and self.value is not MISSING

    @classmethod
    def accept(cls, value: Any) -> "ValidationOutcome":
        return cls(accepted=True, value=value)

    @classmethod
    def omit(cls) -> "ValidationOutcome":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: str) -> "ValidationOutcome":
        return cls(accepted=False, reason=reason)


def is_missing(raw: Any) -> bool:
    if raw is MISSING or raw is None:
        return True
    return isinstance(raw, str) and raw.strip() == ""


def _validate_text(rules: TextRules, raw: Any) -> ValidationOutcome:
    if not isinstance(raw, str):
        return ValidationOutcome.reject("Text answers must be strings.")
    trimmed = raw.strip()
    if rules.min_length is not None and len(trimmed) < rules.min_length:
        return ValidationOutcome.reject(
            f"Text answer must be at least {rules.min_length} characters long."
        )
    if rules.max_length is not None and len(trimmed) > rules.max_length:
        return ValidationOutcome.reject(
            f"Text answer must be at most {rules.max_length} characters long."
        )
    return ValidationOutcome.accept(trimmed)


def _validate_number(rules: NumberRules, raw: Any) -> ValidationOutcome:
    number = as_number(raw)
    if number is None:
        return ValidationOutcome.reject("Number answers must be numeric.")
    if rules.min is not None and number < rules.min:
        return ValidationOutcome.reject(f"Number answer cannot be less than {rules.min}.")
    if rules.max is not None and number > rules.max:
        return ValidationOutcome.reject(f"Number answer cannot be greater than {rules.max}.")
    if rules.step is not None:
        base = rules.min if rules.min is not None else 0
        remainder = (number - base) % rules.step
        if remainder > STEP_TOLERANCE and abs(remainder - rules.step) > STEP_TOLERANCE:
            return ValidationOutcome.reject(f"Number answer must align with step {rules.step}.")
    return ValidationOutcome.accept(number)


def _selection_label(rules: OptionRules) -> str:
    return rules.kind.capitalize()


def _validate_options(rules: OptionRules, raw: Any) -> ValidationOutcome:
    label = _selection_label(rules)
    if rules.options is None:
        return ValidationOutcome.reject(
            f"{label} component is missing valid options for validation."
        )

    if rules.multiple:
        if not isinstance(raw, (list, tuple)):
            if rules.kind == "checkbox":
                return ValidationOutcome.reject(
                    "Checkbox answers must be an array of selected values."
                )
            return ValidationOutcome.reject(f"{label} (multiple) answers must be an array of values.")
        selections = [str(entry) for entry in raw]
        invalid = [value for value in selections if value not in rules.options]
        if invalid:
            return ValidationOutcome.reject(
                f"{label} answer contains invalid option(s): {', '.join(invalid)}."
            )
        if rules.max_selections is not None and len(selections) > rules.max_selections:
            return ValidationOutcome.reject(
                f"{label} answer cannot select more than {rules.max_selections} options."
            )
        return ValidationOutcome.accept(selections)

    if isinstance(raw, (list, tuple, dict)):
        return ValidationOutcome.reject(f"{label} answer must be a single value.")
    selection = str(raw)
    if selection not in rules.options:
        return ValidationOutcome.reject(
            f"{label} answer must be one of: {', '.join(rules.options)}."
        )
    return ValidationOutcome.accept(selection)


def _validate_datetime(rules: DateRules, raw: Any) -> ValidationOutcome:
    if not isinstance(raw, str):
        return ValidationOutcome.reject("Datetime answers must be ISO date strings.")
    parsed = parse_timestamp(raw)
    if parsed is None:
        return ValidationOutcome.reject("Datetime answer must be a valid ISO date string.")
    if rules.min is not None and parsed < rules.min:
        return ValidationOutcome.reject(f"Datetime answer cannot be earlier than {rules.min_text}.")
    if rules.max is not None and parsed > rules.max:
        return ValidationOutcome.reject(f"Datetime answer cannot be later than {rules.max_text}.")
    return ValidationOutcome.accept(raw)


def _validate_file(rules: FileRules, raw: Any) -> ValidationOutcome:
    if not isinstance(raw, str):
        return ValidationOutcome.reject("File answers must be strings (e.g., URLs or IDs).")
    if rules.max_size_mb is not None:
        if len(raw.encode("utf-8")) / BYTES_PER_MB > rules.max_size_mb:
            return ValidationOutcome.reject(
                f"File answer exceeds max size of {rules.max_size_mb} MB."
            )
    if rules.accept_extensions:
        path = raw.split("?", 1)[0].split("#", 1)[0].lower()
        if not path.endswith(rules.accept_extensions):
            return ValidationOutcome.reject(
                f"File answer must be one of the accepted types: {', '.join(rules.accept_extensions)}."
            )
    return ValidationOutcome.accept(raw)


def _validate_button(rules: ButtonRules, raw: Any) -> ValidationOutcome:
    if not isinstance(raw, str):
        return ValidationOutcome.reject("Button answers (if provided) must be strings.")
    return ValidationOutcome.accept(raw)


def _pass_through(rules: PassthroughRules, raw: Any) -> ValidationOutcome:
    return ValidationOutcome.accept(raw)


_HANDLERS: dict[type, Callable[[Any, Any], ValidationOutcome]] = {
    TextRules: _validate_text,
    NumberRules: _validate_number,
    OptionRules: _validate_options,
    DateRules: _validate_datetime,
    FileRules: _validate_file,
    ButtonRules: _validate_button,
    PassthroughRules: _pass_through,
}


def validate_with_rules(rules: ComponentRules, raw_value: Any = MISSING) -> ValidationOutcome:
    if is_missing(raw_value):
        if rules.required:
            return ValidationOutcome.reject(f"Component '{rules.label}' is required.")
        return ValidationOutcome.omit()
    handler = _HANDLERS.get(type(rules))
    if handler is None:
        return ValidationOutcome.reject(f"Unsupported component type: {rules.kind}.")
    return handler(rules, raw_value)


def validate_answer(component: ComponentDescriptor, raw_value: Any = MISSING) -> ValidationOutcome:
    """Validate one raw answer against one canonical component."""
    return validate_with_rules(parse_rules(component), raw_value)


__all__ = [
    "MISSING",
    "STEP_TOLERANCE",
    "ValidationOutcome",
    "is_missing",
    "validate_answer",
    "validate_with_rules",
]
