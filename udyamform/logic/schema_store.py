"""Loaded-once Schema Document holder.

The API reads the schema file once at startup and serves the resulting
immutable value for every request. `reload()` is the only way to pick up a
new file; a failed reload keeps serving the previous document.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from udyamform.logic.etag import compute_schema_etag
from udyamform.logic.events import SCHEMA_LOAD_FAILED, SCHEMA_LOADED, SCHEMA_RELOADED, publish
from udyamform.logic.validation import RecordValidator, compile_record_validator
from udyamform.models.schema_document import SchemaDocument

logger = logging.getLogger(__name__)


class SchemaUnavailableError(RuntimeError):
    """Raised when the Schema Document is missing, unreadable or not loaded."""


class SchemaDocumentError(SchemaUnavailableError):
    """Raised when the Schema Document violates its structural invariants."""


@dataclass(frozen=True)
class LoadedSchema:
    raw: Dict[str, Any]
    document: SchemaDocument
    validator: RecordValidator
    etag: str


def parse_schema_document(raw: Any) -> SchemaDocument:
    try:
        return SchemaDocument.model_validate(raw)
    except PydanticValidationError as exc:
        raise SchemaDocumentError(f"invalid schema document: {exc.error_count()} error(s): {exc}") from exc


def read_schema_file(path: Path) -> LoadedSchema:
    """Read, parse and compile the schema file at `path`."""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SchemaUnavailableError(f"schema document not readable at {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise SchemaDocumentError("schema document must be a JSON object")
    document = parse_schema_document(raw)
    return LoadedSchema(
        raw=raw,
        document=document,
        validator=compile_record_validator(document),
        etag=compute_schema_etag(raw),
    )


class SchemaStore:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._current: Optional[LoadedSchema] = None
        self._last_error: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._current is not None

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def load(self) -> Optional[LoadedSchema]:
        """Startup load. Failures are logged and remembered, never raised."""
        try:
            return self._swap(SCHEMA_LOADED)
        except SchemaUnavailableError as exc:
            logger.error("schema_load_failed path=%s error=%s", self.path, exc)
            return None

    def reload(self) -> LoadedSchema:
        """Re-read the schema file; raise and keep the previous value on failure."""
        return self._swap(SCHEMA_RELOADED)

    def current(self) -> LoadedSchema:
        loaded = self._current
        if loaded is None:
            raise SchemaUnavailableError(self._last_error or "schema document not loaded")
        return loaded

    def _swap(self, event: str) -> LoadedSchema:
        with self._lock:
            try:
                loaded = read_schema_file(self.path)
            except SchemaUnavailableError as exc:
                self._last_error = str(exc)
                publish(SCHEMA_LOAD_FAILED, {"path": str(self.path), "error": str(exc)})
                raise
            self._current = loaded
            self._last_error = None
        publish(
            event,
            {
                "path": str(self.path),
                "steps": len(loaded.document.steps),
                "fields": len(loaded.validator.field_names),
                "etag": loaded.etag,
            },
        )
        return loaded


__all__ = [
    "LoadedSchema",
    "SchemaDocumentError",
    "SchemaStore",
    "SchemaUnavailableError",
    "parse_schema_document",
    "read_schema_file",
]
