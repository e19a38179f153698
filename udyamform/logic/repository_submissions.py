"""Submission data access helpers.

Encapsulates the submission INSERT/SELECT statements to keep route handlers
free of inline SQL. The store contract is `create_submission(record) -> id`;
concurrency control is left to the database (one atomic INSERT per record).
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError

from udyamform.db.base import get_engine

logger = logging.getLogger(__name__)

# Stored column -> record key for the fields projected out of the payload
KNOWN_FIELD_COLUMNS: Dict[str, str] = {
    "aadhaar": "aadhaarNumber",
    "aadhaar_name": "aadhaarName",
    "mobile": "mobile",
    "captcha": "captcha",
    "otp": "otp",
    "pan_number": "panNumber",
    "pan_name": "panName",
    "pin_code": "pinCode",
    "district": "district",
    "state": "state",
    "org_type": "orgType",
}


class SubmissionStoreError(RuntimeError):
    """Raised when a submission cannot be written to or read from the store."""


def _created_at() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def build_submission_row(record: Mapping[str, Any], submission_id: str, created_at: str) -> Dict[str, Any]:
    """Project a validated record onto the stored column layout.

    Empty values are stored as NULL; the full record is kept as JSON payload.
    """
    row: Dict[str, Any] = {"id": submission_id, "created_at": created_at}
    for column, key in KNOWN_FIELD_COLUMNS.items():
        row[column] = record.get(key) or None
    row["payload"] = json.dumps(dict(record), ensure_ascii=False, sort_keys=True)
    return row


def create_submission(record: Mapping[str, Any]) -> str:
    """Persist a validated record and return its new identifier."""
    submission_id = str(uuid.uuid4())
    row = build_submission_row(record, submission_id, _created_at())
    columns = ", ".join(row.keys())
    params = ", ".join(f":{k}" for k in row.keys())
    try:
        eng = get_engine()
        with eng.begin() as conn:
            conn.execute(sql_text(f"INSERT INTO submission ({columns}) VALUES ({params})"), row)
    except SQLAlchemyError as exc:
        logger.error("submission_insert_failed id=%s", submission_id, exc_info=True)
        raise SubmissionStoreError("submission could not be stored") from exc
    logger.info("submission_inserted id=%s", submission_id)
    return submission_id


def get_submission(submission_id: str) -> Optional[Dict[str, Any]]:
    """Return the stored row for `submission_id` with payload decoded, or None."""
    try:
        eng = get_engine()
        with eng.connect() as conn:
            row = conn.execute(
                sql_text("SELECT * FROM submission WHERE id = :id"),
                {"id": submission_id},
            ).mappings().fetchone()
    except SQLAlchemyError as exc:
        logger.error("submission_select_failed id=%s", submission_id, exc_info=True)
        raise SubmissionStoreError("submission could not be read") from exc
    if row is None:
        return None
    result = dict(row)
    result["payload"] = json.loads(result["payload"]) if result.get("payload") else {}
    return result


__all__ = [
    "KNOWN_FIELD_COLUMNS",
    "SubmissionStoreError",
    "build_submission_row",
    "create_submission",
    "get_submission",
]
