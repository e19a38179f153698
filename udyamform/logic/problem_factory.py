"""Centralised construction of problem+json payloads.

Route modules build error bodies here instead of embedding string literals.
Each payload carries the RFC7807 members (`title`, `status`, `detail`) plus
the contract keys clients read: `errors` for validation failures and `error`
for server-side faults.
"""

from __future__ import annotations

from typing import Dict, List, Mapping
import logging


logger = logging.getLogger(__name__)


def problem_validation_failed(errors: Mapping[str, List[str]]) -> Dict[str, object]:
    """Return a 400 problem listing per-field validation messages."""
    problem = {
        "title": "Validation Failed",
        "status": 400,
        "detail": "One or more fields are invalid",
        "code": "VALIDATION_FAILED",
        "errors": {k: list(v) for k, v in errors.items()},
    }
    logger.info("error_handler.handle code=%s fields=%s", problem["code"], sorted(errors.keys()))
    return problem


def problem_schema_unavailable() -> Dict[str, object]:
    """Return a 500 problem for a missing or unreadable Schema Document."""
    problem = {
        "title": "Internal Server Error",
        "status": 500,
        "detail": "Schema document is not available",
        "code": "RUN_SCHEMA_UNAVAILABLE",
        "error": "Schema not found",
    }
    logger.info("error_handler.handle code=%s", problem["code"])
    return problem


def problem_validation_unavailable() -> Dict[str, object]:
    """Return a 500 problem when validation cannot run (no schema loaded)."""
    problem = {
        "title": "Internal Server Error",
        "status": 500,
        "detail": "Validation could not run because no schema is loaded",
        "code": "RUN_VALIDATION_UNAVAILABLE",
        "error": "Validation failed",
    }
    logger.info("error_handler.handle code=%s", problem["code"])
    return problem


def problem_submit_failed() -> Dict[str, object]:
    """Return a 500 problem for a submission the store could not accept."""
    problem = {
        "title": "Internal Server Error",
        "status": 500,
        "detail": "Submission could not be stored",
        "code": "RUN_SUBMISSION_STORE_FAILED",
        "error": "Submit failed",
    }
    logger.info("error_handler.handle code=%s", problem["code"])
    return problem


def problem_body_not_json(reason: str) -> Dict[str, object]:
    """Return a 400 problem for a body that is missing or cannot be decoded."""
    problem = {
        "title": "Invalid Request",
        "status": 400,
        "detail": f"Request body must be valid JSON: {reason}",
        "code": "PRE_REQUEST_BODY_INVALID_JSON",
        "errors": {"": ["Request body must be valid JSON."]},
    }
    logger.info("error_handler.handle code=%s", problem["code"])
    return problem


def problem_body_not_object() -> Dict[str, object]:
    """Return a 400 problem for a JSON body that is not an object."""
    problem = {
        "title": "Invalid Request",
        "status": 400,
        "detail": "Request body must be a JSON object",
        "code": "PRE_REQUEST_BODY_NOT_OBJECT",
        "errors": {"": ["Request body must be a JSON object."]},
    }
    logger.info("error_handler.handle code=%s", problem["code"])
    return problem


__all__ = [
    "problem_validation_failed",
    "problem_schema_unavailable",
    "problem_validation_unavailable",
    "problem_submit_failed",
    "problem_body_not_object",
    "problem_body_not_json",
]
