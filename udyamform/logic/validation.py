"""Schema-driven field validation.

One rule-set, two callers: the form controller validates a step before
advancing or submitting, and the API compiles the whole Schema Document into
a record validator for the authoritative check. Both go through
`validate_value` so client and server never disagree on what is valid.

Rules, applied in order (first failure wins):
- required and empty -> "<label> is required."
- longer than maxLength -> "<label> must be at most N characters."
- does not match pattern -> "<label> format is invalid."

A pattern that does not compile fails open: a warning is logged and the
value passes.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Mapping, Optional, Pattern, Tuple

from udyamform.models.schema_document import FieldDescriptor, SchemaDocument

logger = logging.getLogger(__name__)


def _browser_pattern(pattern: str) -> str:
    """Rewrite `$` anchors to `\\Z` so a trailing newline does not match.

    Browser patterns are non-multiline: `$` matches only at the very end of
    the value. Escaped dollars and dollars inside character classes are
    literal and stay as they are.
    """
    out: List[str] = []
    in_class = False
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\" and i + 1 < len(pattern):
            out.append(pattern[i : i + 2])
            i += 2
            continue
        if in_class:
            in_class = ch != "]"
        elif ch == "[":
            in_class = True
        elif ch == "$":
            ch = r"\Z"
        out.append(ch)
        i += 1
    return "".join(out)


@lru_cache(maxsize=256)
def _compile(pattern: str) -> Optional[Pattern[str]]:
    # ASCII: browser \d, \w and \b never match digits or letters of other scripts
    try:
        return re.compile(_browser_pattern(pattern), re.ASCII)
    except re.error:
        return None


def validate_value(value: str, field: FieldDescriptor) -> Optional[str]:
    """Return an error message for `value` under `field`, or None when valid."""
    value = value or ""
    if field.required and not value:
        return f"{field.label} is required."
    if value and field.max_length is not None and len(value) > field.max_length:
        return f"{field.label} must be at most {field.max_length} characters."
    if value and field.pattern:
        compiled = _compile(field.pattern)
        if compiled is None:
            logger.warning("invalid_pattern field=%s pattern=%r; treating as valid", field.name, field.pattern)
            return None
        # Search semantics: anchors inside the pattern decide whole-value matching
        if compiled.search(value) is None:
            return f"{field.label} format is invalid."
    return None


def validate_fields(values: Mapping[str, str], fields: Iterable[FieldDescriptor]) -> Dict[str, str]:
    """Validate each field's current value; return name -> message for failures."""
    errors: Dict[str, str] = {}
    for f in fields:
        message = validate_value(values.get(f.name, ""), f)
        if message:
            errors[f.name] = message
    return errors


class RecordValidator:
    """Whole-record validator compiled from a Schema Document.

    Holds one descriptor per field name across all steps. Calling the
    validator returns name -> [messages], empty when the record is valid.
    """

    def __init__(self, fields: Iterable[FieldDescriptor]) -> None:
        self._fields: Tuple[FieldDescriptor, ...] = tuple(fields)

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self._fields]

    def __call__(self, record: Mapping[str, Any]) -> Dict[str, List[str]]:
        errors: Dict[str, List[str]] = {}
        for f in self._fields:
            raw = record.get(f.name)
            if raw is not None and not isinstance(raw, str):
                errors[f.name] = [f"{f.label} must be a string."]
                continue
            message = validate_value(raw or "", f)
            if message:
                errors[f.name] = [message]
        return errors

    def clean(self, record: Mapping[str, Any]) -> Dict[str, str]:
        """Return the record restricted to schema fields, absent values as ""."""
        return {f.name: str(record.get(f.name) or "") for f in self._fields}


def compile_record_validator(schema: SchemaDocument) -> RecordValidator:
    return RecordValidator(schema.iter_fields())


__all__ = [
    "validate_value",
    "validate_fields",
    "RecordValidator",
    "compile_record_validator",
]
