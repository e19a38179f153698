"""Pure DOM-to-descriptor normalization for the registration page scrape.

The browser layer snapshots each form control into an `ElementSnapshot`;
everything here works on those snapshots so it can run without a browser.
Normalization picks the authoring-time input transform for each field and
drops controls that are not user input (hidden state, buttons).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from udyamform.logic.transform_engine import default_transform_for
from udyamform.models.field_kind import FieldKind

logger = logging.getLogger(__name__)

UDYAM_REGISTRATION_URL = "https://udyamregistration.gov.in/UdyamRegistration.aspx"

STEP_TITLES = ("Step 1 – Aadhaar & OTP", "Step 2 – PAN Validation")

# Input types that carry no user-entered value
NON_INPUT_TYPES = frozenset({"hidden", "submit", "button", "reset", "image", "file"})

# (name fragments, regex) rules added when the page does not declare a pattern.
# The live page spells the Aadhaar control "adhar".
AADHAAR_RULE = (("aadhaar", "adhar"), r"^\d{12}$")
PAN_RULE = ("pan", r"^[A-Z]{5}[0-9]{4}[A-Z]{1}$")


@dataclass(frozen=True)
class ElementSnapshot:
    """Attributes of one form control as captured from the rendered page."""

    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    label: Optional[str] = None
    options: Tuple[Tuple[str, str], ...] = ()


def _parse_max_length(raw: Optional[str]) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("ignored_maxlength value=%r", raw)
        return None
    # Browsers report -1 / huge values when no limit is set
    return value if 0 <= value < 524288 else None


def normalize_field(el: ElementSnapshot) -> Optional[Dict[str, Any]]:
    """Convert a snapshot into a field descriptor dict, or None to skip it."""
    tag = el.tag.lower()
    attrs = el.attrs
    field_id = attrs.get("id") or attrs.get("name") or ""
    name = attrs.get("name") or field_id
    if not name:
        return None
    input_type = (attrs.get("type") or ("select" if tag == FieldKind.SELECT else "text")).lower()
    if tag == "input" and input_type in NON_INPUT_TYPES:
        return None
    label = (el.label or "").strip() or (attrs.get("aria-label") or "").strip() or name
    descriptor: Dict[str, Any] = {
        "id": field_id,
        "name": name,
        "label": label,
        "kind": tag,
        "inputType": input_type,
        "placeholder": attrs.get("placeholder") or None,
        "required": "required" in attrs,
        "pattern": attrs.get("pattern") or None,
        "maxLength": _parse_max_length(attrs.get("maxlength")),
        "transform": default_transform_for(name, input_type=input_type, kind=tag),
    }
    if tag == FieldKind.SELECT:
        options = [{"label": text, "value": value or text} for text, value in el.options if text]
        if not options:
            logger.info("skipped_select_without_options name=%s", name)
            return None
        descriptor["options"] = options
    return {k: v for k, v in descriptor.items() if v is not None}


def normalize_fields(elements: Iterable[ElementSnapshot], *, exclude: Sequence[str] = ()) -> List[Dict[str, Any]]:
    """Normalize snapshots in page order, dropping duplicates and excluded names."""
    seen = set(exclude)
    fields: List[Dict[str, Any]] = []
    for el in elements:
        descriptor = normalize_field(el)
        if descriptor is None or descriptor["name"] in seen:
            continue
        seen.add(descriptor["name"])
        fields.append(descriptor)
    return fields


def ensure_rule(fields: List[Dict[str, Any]], key: Union[str, Sequence[str]], regex: str) -> bool:
    """Attach `regex` to the first field whose id or name contains `key`.

    `key` may be one fragment or several alternatives. Only fills a missing
    pattern; returns True when a pattern was added.
    """
    keys = (key,) if isinstance(key, str) else tuple(key)
    for f in fields:
        haystack = (f.get("id", "") + " " + f.get("name", "")).lower()
        if any(k in haystack for k in keys):
            if f.get("pattern"):
                return False
            f["pattern"] = regex
            return True
    return False


def build_schema_document(
    step1: Sequence[ElementSnapshot],
    step2: Sequence[ElementSnapshot],
    *,
    source: str = UDYAM_REGISTRATION_URL,
    generated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Assemble the two-step Schema Document from the two page captures.

    The second capture is taken after revealing the OTP section and still
    contains the first step's controls; those are excluded so every field
    name appears once across the document.
    """
    step1_fields = normalize_fields(step1)
    step2_fields = normalize_fields(step2, exclude=[f["name"] for f in step1_fields])
    ensure_rule(step1_fields, *AADHAAR_RULE)
    ensure_rule(step2_fields, *PAN_RULE)
    stamp = (generated_at or datetime.now(timezone.utc)).isoformat(timespec="seconds").replace("+00:00", "Z")
    steps = [
        {"title": title, "fields": fields}
        for title, fields in zip(STEP_TITLES, (step1_fields, step2_fields))
        if fields
    ]
    return {"generatedAt": stamp, "source": source, "steps": steps}


__all__ = [
    "ElementSnapshot",
    "UDYAM_REGISTRATION_URL",
    "build_schema_document",
    "ensure_rule",
    "normalize_field",
    "normalize_fields",
]
