"""Internal operations endpoints.

These routes are not part of the public API and are only mounted when
`server.expose_internal_routes` is enabled. They expose the schema reload
hook and the buffered domain events used by integration tests.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from udyamform.http.problem import problem_response
from udyamform.logic.events import get_buffered_events
from udyamform.logic.problem_factory import problem_schema_unavailable
from udyamform.logic.schema_store import SchemaUnavailableError
from udyamform.routes.schema import get_schema_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internal")


@router.post("/schema/reload", summary="Re-read the Schema Document from disk")
def reload_schema(request: Request) -> Response:
    store = get_schema_store(request)
    try:
        loaded = store.reload()
    except SchemaUnavailableError as exc:
        logger.error("schema_reload_failed error=%s", exc)
        return problem_response(problem_schema_unavailable())
    return JSONResponse({"ok": True, "etag": loaded.etag, "steps": len(loaded.document.steps)})


@router.get("/events", summary="Buffered domain events")
def list_events() -> JSONResponse:
    """Return buffered events without clearing them."""
    return JSONResponse(get_buffered_events(clear=False))


@router.post("/events/reset", summary="Clear buffered domain events")
def reset_events() -> Response:
    get_buffered_events(clear=True)
    return Response(status_code=204)


__all__ = ["router", "reload_schema", "list_events", "reset_events"]
