"""Static input transform catalog."""

from __future__ import annotations

from typing import List, Mapping

from udyamform.models.field_kind import InputTransform


TRANSFORM_REGISTRY: List[Mapping[str, str]] = [
    {"name": InputTransform.IDENTITY, "title": "Keep as typed"},
    {"name": InputTransform.DIGITS_ONLY, "title": "Digits only"},
    {"name": InputTransform.UPPERCASE, "title": "Uppercase"},
]

__all__ = ["TRANSFORM_REGISTRY"]
