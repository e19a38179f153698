"""FieldKind and InputTransform constants for schema field descriptors.

Provides simple constants containers instead of Enums to keep schema JSON
values as plain strings.
"""

from __future__ import annotations


class FieldKind:
    TEXT = "text"
    INPUT = "input"
    SELECT = "select"
    TEXTAREA = "textarea"


class InputTransform:
    IDENTITY = "identity"
    DIGITS_ONLY = "digits_only"
    UPPERCASE = "uppercase"

    ALL = (IDENTITY, DIGITS_ONLY, UPPERCASE)


# Input types whose values are numeric by nature
NUMERIC_INPUT_TYPES = frozenset({"tel", "number"})


__all__ = ["FieldKind", "InputTransform", "NUMERIC_INPUT_TYPES"]
