"""Pure input transform logic.

No FastAPI/Starlette imports. Transforms are chosen per field when the schema
is authored (by the scraper, or once at load time for documents that predate
the `transform` attribute) and applied by the form controller on every input.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, Optional

from udyamform.models.field_kind import FieldKind, InputTransform, NUMERIC_INPUT_TYPES


# Browser-side digit filtering keeps ASCII 0-9 only
_NON_DIGITS = re.compile(r"[^0-9]+")

# Name fragments that mark a field as numeric-only ("adhar" is the live page spelling)
DIGIT_NAME_HINTS = ("pin", "aadhaar", "adhar", "otp")


def only_digits(raw: str) -> str:
    return _NON_DIGITS.sub("", raw or "")


def _identity(raw: str) -> str:
    return raw or ""


def _uppercase(raw: str) -> str:
    return (raw or "").upper()


TRANSFORMS: Dict[str, Callable[[str], str]] = {
    InputTransform.IDENTITY: _identity,
    InputTransform.DIGITS_ONLY: only_digits,
    InputTransform.UPPERCASE: _uppercase,
}


def apply_transform(transform: str, raw: str) -> str:
    """Apply a named input transform to a raw value.

    Unknown transform names raise KeyError; descriptors are validated at load
    time so this only happens for programming errors.
    """
    return TRANSFORMS[transform](raw)


def default_transform_for(name: str, input_type: Optional[str] = None, kind: Optional[str] = None) -> str:
    """Pick the authoring-time transform for a field.

    Rules, first match wins:
    - select fields keep option values as-is
    - names containing "name" -> identity
    - numeric input types, or names containing pin/aadhaar/otp -> digits_only
    - everything else -> uppercase
    """
    if (kind or "").lower() == FieldKind.SELECT:
        return InputTransform.IDENTITY
    lowered = (name or "").lower()
    if "name" in lowered:
        return InputTransform.IDENTITY
    if (input_type or "").lower() in NUMERIC_INPUT_TYPES or any(h in lowered for h in DIGIT_NAME_HINTS):
        return InputTransform.DIGITS_ONLY
    return InputTransform.UPPERCASE


__all__ = ["TRANSFORMS", "apply_transform", "default_transform_for", "only_digits", "DIGIT_NAME_HINTS"]
