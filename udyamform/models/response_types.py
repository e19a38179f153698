"""Pydantic models for API response bodies."""

from __future__ import annotations

from typing import Dict, List, Optional
from pydantic import BaseModel


class ValidateOk(BaseModel):
    ok: bool = True


class SubmitOk(BaseModel):
    ok: bool = True
    id: str


class ValidationErrors(BaseModel):
    """Body of a 400 response: field name -> list of messages."""
    errors: Dict[str, List[str]]


class HealthStatus(BaseModel):
    ok: bool
    schema_loaded: bool
    schema_error: Optional[str] = None


__all__ = [
    "ValidateOk",
    "SubmitOk",
    "ValidationErrors",
    "HealthStatus",
]
