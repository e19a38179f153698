"""Centralised ETag header emitter.

Provides a single function to set the domain-specific ETag header and the
generic `ETag` header, so route handlers never assign ETag headers directly.
"""

from __future__ import annotations

import logging
from fastapi import Response

logger = logging.getLogger(__name__)


SCOPE_TO_HEADER = {
    "schema": "Schema-ETag",
}


def emit_etag_headers(response: Response, scope: str, token: str, include_generic: bool = True) -> None:
    """Set domain and generic ETag headers on the response.

    - `scope`: one of SCOPE_TO_HEADER keys
    - `token`: the entity tag value to set; blank tokens are never emitted
    - `include_generic`: when True, also set `ETag` alongside the domain header
    """
    token_str = str(token or "").strip()
    if not token_str:
        logger.warning("emit_etag_headers_skipped_blank scope=%s", scope)
        return
    header_name = SCOPE_TO_HEADER.get(scope)
    if header_name:
        response.headers[header_name] = token_str
    if include_generic:
        response.headers["ETag"] = token_str


__all__ = ["emit_etag_headers", "SCOPE_TO_HEADER"]
