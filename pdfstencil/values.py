"""Coercion of loosely typed data values into what gets drawn.

Values arrive from form controls and JSON as strings, numbers or booleans.
They are converted once, per field, into a ``FieldValue`` before rendering.
"""

from __future__ import annotations

from typing import NamedTuple, Optional, Union

from .models import DataValue, FieldType

TRUE_TOKENS = frozenset(["true", "yes", "y", "1", "on", "x", "checked"])


class FieldValue(NamedTuple):
    kind: str  # "text" | "checkbox"
    value: Union[str, bool]


def parse_checkbox(raw) -> bool:
    """Tolerant truthiness for checkbox data. Never raises."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0
    if isinstance(raw, str):
        return raw.strip().lower() in TRUE_TOKENS
    return False


def to_text(raw: DataValue) -> str:
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw)


def coerce_value(field_type: FieldType, raw: Optional[DataValue]) -> Optional[FieldValue]:
    if raw is None:
        return None
    if field_type == "checkbox":
        return FieldValue("checkbox", parse_checkbox(raw))
    return FieldValue("text", to_text(raw))


def coerce_form_input(field_type: FieldType, raw):
    """Convert what a user typed into a data-entry control into a data value.

    Number inputs become numbers when they parse (blank stays ``""``, junk
    stays as typed); checkbox inputs become booleans.
    """
    if field_type == "checkbox":
        return parse_checkbox(raw) if isinstance(raw, str) else bool(raw)
    if field_type == "number" and isinstance(raw, str):
        if raw.strip() == "":
            return ""
        try:
            number = float(raw)
        except ValueError:
            return raw
        return int(number) if number.is_integer() and "." not in raw else number
    return raw
