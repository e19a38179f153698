"""Database bootstrap utilities for the registration form service.

This module exposes convenience imports for engine construction and a
migrations runner that applies SQL files from the local migrations/
directory. The DB layer does not leak ORM models into route handlers.
"""

from udyamform.db.base import dispose_engine, get_engine
from udyamform.db.migrations_runner import apply_migrations

__all__ = [
    "get_engine",
    "dispose_engine",
    "apply_migrations",
]
