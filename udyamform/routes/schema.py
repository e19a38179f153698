"""Schema endpoint.

Implements:
- GET /schema
  - Returns the loaded Schema Document verbatim
  - Emits Schema-ETag/ETag; a matching If-None-Match yields 304
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from udyamform.http.problem import problem_response
from udyamform.logic.etag import if_none_match_matches
from udyamform.logic.header_emitter import emit_etag_headers
from udyamform.logic.problem_factory import problem_schema_unavailable
from udyamform.logic.schema_store import SchemaStore, SchemaUnavailableError


router = APIRouter()
logger = logging.getLogger(__name__)


def get_schema_store(request: Request) -> SchemaStore:
    return request.app.state.schema_store


@router.get(
    "/schema",
    summary="Get the registration form Schema Document",
    operation_id="getSchema",
    responses={304: {"description": "Not Modified"}, 500: {"content": {"application/problem+json": {}}}},
)
def get_schema(request: Request) -> Response:
    try:
        loaded = get_schema_store(request).current()
    except SchemaUnavailableError as exc:
        logger.error("schema_get_failed error=%s", exc)
        return problem_response(problem_schema_unavailable())

    if if_none_match_matches(loaded.etag, request.headers.get("If-None-Match")):
        not_modified = Response(status_code=304)
        emit_etag_headers(not_modified, scope="schema", token=loaded.etag)
        return not_modified

    resp = JSONResponse(loaded.raw, status_code=200, media_type="application/json")
    emit_etag_headers(resp, scope="schema", token=loaded.etag)
    return resp


__all__ = ["router", "get_schema", "get_schema_store"]
