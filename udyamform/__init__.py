"""Udyam registration form replica.

Subpackages:
- `udyamform.scraper` extracts the form's field metadata into a Schema Document
- `udyamform.client` drives the multi-step wizard against the API
- the FastAPI service (`create_app`) serves the schema and stores submissions

Business logic lives in `udyamform/logic/` and route handlers in
`udyamform/routes/`.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["create_app", "__version__"]


def __getattr__(name: str):
    # Lazy so the scraper and client do not import the web stack
    if name == "create_app":
        from udyamform.main import create_app

        return create_app
    raise AttributeError(name)
