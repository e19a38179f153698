"""Functional test bootstrap.

Points the service at a file-backed SQLite database under `tmp/` and applies
the SQL migrations once per session, before any test builds the FastAPI app.
App fixtures construct `AppConfig` directly so each test can choose its own
Schema Document path without touching the environment.

This file is scoped under tests/functional/ so Behave (integration) runs are
unaffected.
"""

from __future__ import annotations

import json
import os
import pathlib
import shutil
from typing import Any, Dict, Iterator

import pytest

_ROOT = pathlib.Path(__file__).resolve().parents[2]
_DB_FILE = _ROOT / "tmp" / "functional_tests.db"
_DB_FILE.parent.mkdir(parents=True, exist_ok=True)
_DB_FILE.unlink(missing_ok=True)

# Set before any udyamform import so the engine binds to the test database
os.environ["TEST_DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
os.environ["DATABASE_URL"] = os.environ["TEST_DATABASE_URL"]
# Startup migrations are applied once below instead of per app
os.environ["AUTO_APPLY_MIGRATIONS"] = "0"

PUBLIC_SCHEMA = _ROOT / "public" / "schema.json"
SCHEMAS_DIR = _ROOT / "schemas"


def _apply_sqlite_migrations() -> None:
    from udyamform.db.base import get_engine
    from udyamform.db.migrations_runner import apply_migrations

    engine = get_engine(os.environ["TEST_DATABASE_URL"])
    apply_migrations(engine, migrations_dir=str(_ROOT / "migrations"))


@pytest.fixture(scope="session", autouse=True)
def functional_sqlite_bootstrap() -> Iterator[None]:
    """Session-level bootstrap: apply migrations once for the shared DB."""
    _apply_sqlite_migrations()
    yield


@pytest.fixture(autouse=True)
def _clear_events() -> Iterator[None]:
    from udyamform.logic.events import EVENT_BUFFER

    EVENT_BUFFER.clear()
    yield
    EVENT_BUFFER.clear()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# --------------------
# Schema fixtures
# --------------------


@pytest.fixture
def public_schema_raw() -> Dict[str, Any]:
    return json.loads(PUBLIC_SCHEMA.read_text(encoding="utf-8"))


@pytest.fixture
def schema_copy(tmp_path: pathlib.Path) -> pathlib.Path:
    """A writable copy of the bundled schema in its own static directory."""
    target = tmp_path / "static" / "schema.json"
    target.parent.mkdir(parents=True)
    shutil.copyfile(PUBLIC_SCHEMA, target)
    return target


@pytest.fixture
def valid_record() -> Dict[str, str]:
    return {
        "aadhaarNumber": "123456789012",
        "aadhaarName": "Ravi Kumar",
        "mobile": "9876543210",
        "captcha": "",
        "otp": "",
        "panNumber": "ABCDE1234F",
        "panName": "Ravi Kumar",
        "pinCode": "560001",
        "district": "BENGALURU",
        "state": "KARNATAKA",
        "orgType": "1",
    }


# --------------------
# App fixtures
# --------------------


def make_config(schema_path: pathlib.Path, *, internal: bool = True):
    from udyamform.config import AppConfig, DatabaseConfig, PinLookupConfig, SchemaConfig, ServerConfig

    return AppConfig(
        database=DatabaseConfig(dsn=os.environ["TEST_DATABASE_URL"], auto_apply_migrations=False),
        schema_doc=SchemaConfig(path=schema_path),
        pin_lookup=PinLookupConfig(),
        server=ServerConfig(expose_internal_routes=internal),
    )


@pytest.fixture
def app_factory():
    from udyamform.main import create_app

    def _factory(schema_path: pathlib.Path = PUBLIC_SCHEMA, *, internal: bool = True):
        return create_app(make_config(schema_path, internal=internal))

    return _factory


@pytest.fixture
def client(app_factory):
    from fastapi.testclient import TestClient

    with TestClient(app_factory()) as c:
        yield c
