"""Liveness endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request

from udyamform.models.response_types import HealthStatus
from udyamform.routes.schema import get_schema_store

router = APIRouter()


@router.get("/health", summary="Service liveness and schema status", response_model=HealthStatus)
def health(request: Request) -> HealthStatus:
    store = get_schema_store(request)
    return HealthStatus(ok=True, schema_loaded=store.loaded, schema_error=store.last_error)


__all__ = ["router", "health"]
