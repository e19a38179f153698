"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type, a response helper used by route modules and
handler callables that turn framework exceptions into
application/problem+json responses.
"""

from __future__ import annotations

from typing import Any, Mapping
import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from fastapi.responses import JSONResponse

from udyamform.logic.problem_factory import problem_body_not_json

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem_response(problem: Mapping[str, Any], headers: Mapping[str, str] | None = None) -> JSONResponse:
    """Render a problem dict built by `logic.problem_factory`."""
    status = int(problem.get("status", 500) or 500)
    return JSONResponse(dict(problem), status_code=status, media_type=PROBLEM_MEDIA_TYPE, headers=dict(headers or {}) or None)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status = int(getattr(exc, "status_code", 500) or 500)
    if isinstance(exc.detail, dict):
        detail = dict(exc.detail)
        detail.setdefault("status", status)
    else:
        detail = {"title": "Error", "status": status, "detail": str(exc.detail or "")}
    headers = {str(k): str(v) for k, v in (exc.headers or {}).items()}
    return JSONResponse(detail, status_code=status, media_type=PROBLEM_MEDIA_TYPE, headers=headers or None)


def _body_decode_error(errors: list) -> str | None:
    """Return the reason when the body itself is absent or not JSON.

    The form contract answers these with 400 rather than 422.
    """
    for e in errors:
        loc = tuple(e.get("loc", ()))
        if (e.get("type") == "json_invalid" and loc[:1] == ("body",)) or (e.get("type") == "missing" and loc == ("body",)):
            return str(e.get("msg", "") or e.get("type"))
    return None


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    errors = list(exc.errors())
    reason = _body_decode_error(errors)
    if reason is not None:
        return problem_response(problem_body_not_json(reason))
    problem = {
        "title": "Invalid Request",
        "status": 422,
        "detail": "Request validation failed",
        "errors": [{"loc": list(e.get("loc", ())), "msg": str(e.get("msg", "")), "type": str(e.get("type", ""))} for e in errors],
    }
    logger.info("request_validation_failed path=%s errors=%d", request.url.path, len(errors))
    return JSONResponse(problem, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse(
        {"title": "Internal Server Error", "status": 500, "error": "Internal server error"},
        status_code=500,
        media_type=PROBLEM_MEDIA_TYPE,
    )


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem_response",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
