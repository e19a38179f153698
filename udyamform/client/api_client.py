"""HTTP client for the registration form API.

- `fetch_schema()` tries `GET /api/schema` and falls back to the static copy
  at `/static/schema.json`, then an optional local file; only when all of
  them fail is `SchemaLoadError` raised.
- `validate()` and `submit()` never raise for transport or server faults:
  they return outcomes the wizard can show to the user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import httpx

from udyamform.logic.schema_store import (
    SchemaDocumentError,
    SchemaUnavailableError,
    parse_schema_document,
    read_schema_file,
)
from udyamform.models.schema_document import SchemaDocument

logger = logging.getLogger(__name__)

SCHEMA_PATH = "/api/schema"
STATIC_SCHEMA_PATH = "/static/schema.json"
VALIDATE_PATH = "/api/validate"
SUBMIT_PATH = "/api/submit"


class SchemaLoadError(RuntimeError):
    """Raised when neither the API nor the static path yields a schema."""


@dataclass(frozen=True)
class SubmitOutcome:
    ok: bool
    submission_id: Optional[str] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)
    message: str = ""


def _json_object(resp: httpx.Response) -> Dict[str, Any]:
    """Return the response body when it is a JSON object, else an empty dict."""
    try:
        body = resp.json()
    except ValueError:
        logger.warning("response_not_json status=%s", resp.status_code)
        return {}
    return body if isinstance(body, dict) else {}


def _field_errors(resp: httpx.Response) -> Dict[str, List[str]]:
    errors = _json_object(resp).get("errors")
    if not isinstance(errors, dict):
        return {}
    return {str(k): [str(m) for m in v] if isinstance(v, list) else [str(v)] for k, v in errors.items()}


def _error_text(resp: httpx.Response) -> str:
    body = _json_object(resp)
    if body:
        return str(body.get("error") or body.get("detail") or body.get("title") or f"HTTP {resp.status_code}")
    return f"HTTP {resp.status_code}"


class FormApiClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._owns_client = client is None

    async def _get_schema_json(self, path: str) -> Any:
        resp = await self._client.get(path)
        resp.raise_for_status()
        return resp.json()

    async def fetch_schema(self, fallback_file: Optional[Path] = None) -> SchemaDocument:
        """Load the schema from the API, then the static copy, then `fallback_file`."""
        errors: List[str] = []
        for path in (SCHEMA_PATH, STATIC_SCHEMA_PATH):
            try:
                raw = await self._get_schema_json(path)
                return parse_schema_document(raw)
            except (httpx.HTTPError, ValueError, SchemaDocumentError) as exc:
                logger.warning("schema_fetch_failed path=%s error=%s", path, exc)
                errors.append(f"{path}: {exc}")
        if fallback_file is not None:
            try:
                return read_schema_file(fallback_file).document
            except SchemaUnavailableError as exc:
                logger.warning("schema_file_failed path=%s error=%s", fallback_file, exc)
                errors.append(str(exc))
        raise SchemaLoadError("could not load schema: " + "; ".join(errors))

    async def validate(self, record: Mapping[str, str]) -> Dict[str, List[str]]:
        """Server pre-check; returns name -> messages (empty when valid).

        Transport failures are reported under the empty-string key.
        """
        try:
            resp = await self._client.post(VALIDATE_PATH, json=dict(record))
        except httpx.HTTPError as exc:
            logger.warning("validate_request_failed error=%s", exc)
            return {"": [f"Validation service unreachable: {exc}"]}
        if resp.status_code == 200:
            return {}
        if resp.status_code == 400:
            # A 400 always means invalid, even when the body names no field
            return _field_errors(resp) or {"": [_error_text(resp)]}
        return {"": [_error_text(resp)]}

    async def submit(self, record: Mapping[str, str]) -> SubmitOutcome:
        try:
            resp = await self._client.post(SUBMIT_PATH, json=dict(record))
        except httpx.HTTPError as exc:
            logger.warning("submit_request_failed error=%s", exc)
            return SubmitOutcome(ok=False, message=f"Could not reach the server: {exc}")
        if resp.status_code == 200:
            submission_id = _json_object(resp).get("id")
            if not submission_id:
                logger.error("submit_unexpected_body status=200")
                return SubmitOutcome(ok=False, message="Submission failed: unexpected response from the server")
            return SubmitOutcome(ok=True, submission_id=str(submission_id), message="Submitted")
        if resp.status_code == 400:
            errors = _field_errors(resp)
            if not errors:
                return SubmitOutcome(ok=False, message=f"The server rejected the record: {_error_text(resp)}")
            return SubmitOutcome(ok=False, errors=errors, message="The server rejected some fields.")
        logger.error("submit_failed status=%s", resp.status_code)
        return SubmitOutcome(ok=False, message=f"Submission failed: {_error_text(resp)}")

    # The form controller takes a plain async callable for submission
    __call__ = submit

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["FormApiClient", "SchemaLoadError", "SubmitOutcome"]
