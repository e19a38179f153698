"""ETag computation helpers for the Schema Document.

The schema is immutable between reloads, so its entity tag is a content hash
of the canonical JSON form. Conditional GETs compare against it with
If-None-Match any-match semantics.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Any, Mapping

logger = logging.getLogger(__name__)


def compute_schema_etag(raw_document: Mapping[str, Any]) -> str:
    """Compute a weak ETag for a schema document.

    Token: canonical JSON (sorted keys, compact separators) -> SHA1 -> W/"…".
    """
    canonical = json.dumps(raw_document, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return f'W/"{hashlib.sha1(canonical.encode("utf-8")).hexdigest()}"'


def _split_entity_tags(value: str) -> list[str]:
    """Split a header value on commas that are not inside quotes."""
    in_quote = False
    buf: list[str] = []
    parts: list[str] = []
    for ch in value:
        if ch == '"':
            in_quote = not in_quote
        if ch == "," and not in_quote:
            parts.append("".join(buf))
            buf = []
            continue
        buf.append(ch)
    parts.append("".join(buf))
    return parts


def normalize_etag_token(value: str | None) -> str:
    """Return the opaque tag without weak prefix or quotes ('' when blank)."""
    s = (value or "").strip()
    if s.upper().startswith("W/"):
        s = s[2:].strip()
    if len(s) >= 2 and s.startswith('"') and s.endswith('"'):
        s = s[1:-1]
    return s.strip()


def if_none_match_matches(current: str, header_value: str | None) -> bool:
    """Return True when If-None-Match names the current entity tag.

    Weak comparison: `W/` prefixes are ignored. A bare `*` matches any tag.
    """
    if not header_value or not header_value.strip():
        return False
    if header_value.strip() == "*":
        return True
    current_norm = normalize_etag_token(current)
    tokens = [normalize_etag_token(t) for t in _split_entity_tags(header_value)]
    matched = any(t and t == current_norm for t in tokens)
    logger.debug("etag.compare tokens=%d matched=%s", len(tokens), matched)
    return matched


__all__ = ["compute_schema_etag", "normalize_etag_token", "if_none_match_matches"]
