"""APIRouter registration for the registration form service."""

from __future__ import annotations

from fastapi import APIRouter

from udyamform.routes.health import router as health_router
from udyamform.routes.schema import router as schema_router
from udyamform.routes.submissions import router as submissions_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["Health"])
api_router.include_router(schema_router, tags=["Schema"])
api_router.include_router(submissions_router, tags=["Submissions"])

__all__ = ["api_router"]
