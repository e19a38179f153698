"""Validation and submission endpoints.

Implements:
- POST /validate
  - Re-derives the record validator from the loaded schema; 200 or 400
- POST /submit
  - Same validation, then persists the record and returns its identifier

Handlers never raise for user-correctable input: validation failures are
returned as structured 400 bodies (`errors: name -> [messages]`).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Union

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from udyamform.http.problem import problem_response
from udyamform.logic.events import SUBMISSION_CREATED, SUBMISSION_REJECTED, publish
from udyamform.logic.problem_factory import (
    problem_body_not_object,
    problem_submit_failed,
    problem_validation_failed,
    problem_validation_unavailable,
)
from udyamform.logic.repository_submissions import SubmissionStoreError, create_submission
from udyamform.logic.schema_store import SchemaUnavailableError
from udyamform.models.response_types import SubmitOk, ValidateOk, ValidationErrors
from udyamform.routes.schema import get_schema_store


router = APIRouter()
logger = logging.getLogger(__name__)

_PROBLEM_RESPONSES = {
    400: {"model": ValidationErrors, "content": {"application/problem+json": {}}},
    500: {"content": {"application/problem+json": {}}},
}


def _check(request: Request, payload: Any) -> Union[Dict[str, Any], JSONResponse]:
    """Shared pre-check: resolve the schema and validate the payload.

    Returns the clean record, or the problem response the request must be
    answered with.
    """
    try:
        loaded = get_schema_store(request).current()
    except SchemaUnavailableError as exc:
        logger.error("validation_schema_unavailable error=%s", exc)
        return problem_response(problem_validation_unavailable())
    if not isinstance(payload, dict):
        return problem_response(problem_body_not_object())
    errors = loaded.validator(payload)
    if errors:
        publish(SUBMISSION_REJECTED, {"path": request.url.path, "fields": sorted(errors.keys())})
        return problem_response(problem_validation_failed(errors))
    return loaded.validator.clean(payload)


@router.post(
    "/validate",
    summary="Pre-check a registration record without storing it",
    operation_id="validateRecord",
    response_model=ValidateOk,
    responses=_PROBLEM_RESPONSES,
)
def validate_record(request: Request, payload: Any = Body(...)):
    checked = _check(request, payload)
    if isinstance(checked, JSONResponse):
        return checked
    return ValidateOk()


@router.post(
    "/submit",
    summary="Validate and store a registration record",
    operation_id="submitRecord",
    response_model=SubmitOk,
    responses=_PROBLEM_RESPONSES,
)
def submit_record(request: Request, payload: Any = Body(...)):
    record = _check(request, payload)
    if isinstance(record, JSONResponse):
        return record
    try:
        submission_id = create_submission(record)
    except SubmissionStoreError:
        return problem_response(problem_submit_failed())
    publish(SUBMISSION_CREATED, {"id": submission_id})
    return SubmitOk(id=submission_id)


__all__ = ["router", "validate_record", "submit_record"]
