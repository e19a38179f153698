"""Configuration utilities for the registration form service.

This module loads application configuration with the following rules:
- Primary source: `udyam_config.json` in the working directory.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("udyam_config.json")
PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SCHEMA_PATH = PROJECT_ROOT / "public" / "schema.json"
DEFAULT_MIGRATIONS_DIR = PROJECT_ROOT / "migrations"
DEFAULT_PIN_LOOKUP_BASE_URL = "https://api.postalpincode.in"
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _truthy(text: Optional[str]) -> bool:
    return str(text or "").strip().lower() in {"1", "true", "yes", "on"}


class DatabaseConfig(BaseModel):
    dsn: str
    auto_apply_migrations: bool = Field(default=True)
    migrations_dir: Path = Field(default=DEFAULT_MIGRATIONS_DIR)

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v


class SchemaConfig(BaseModel):
    path: Path

    @property
    def static_dir(self) -> Path:
        return self.path.parent


class PinLookupConfig(BaseModel):
    base_url: str = Field(default=DEFAULT_PIN_LOOKUP_BASE_URL)
    timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator("base_url")
    @classmethod
    def base_url_must_be_http(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("pin_lookup.base_url must be an http(s) URL")
        return v.rstrip("/")


class ServerConfig(BaseModel):
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = Field(default="INFO")
    expose_internal_routes: bool = Field(default=False)

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(f"server.log_level must be one of {sorted(allowed)}")
        return level


class AppConfig(BaseModel):
    database: DatabaseConfig
    schema_doc: SchemaConfig
    pin_lookup: PinLookupConfig
    server: ServerConfig


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) udyam_config.json in the working directory
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    # Database
    dsn = (
        _env("TEST_DATABASE_URL")
        or _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or "sqlite+pysqlite:///:memory:"
    )
    auto_migrate_text = _env("AUTO_APPLY_MIGRATIONS") or _read_config_file("database.auto_apply_migrations") or _base("database.auto_apply_migrations", "true")
    migrations_dir = _env("MIGRATIONS_DIR") or _base("database.migrations_dir") or str(DEFAULT_MIGRATIONS_DIR)

    # Schema document
    schema_path = _env("SCHEMA_PATH") or _read_config_file("schema.path") or _base("schema.path") or str(DEFAULT_SCHEMA_PATH)

    # PIN lookup collaborator
    pin_base_url = _env("PIN_LOOKUP_BASE_URL") or _read_config_file("pin_lookup.base_url") or _base("pin_lookup.base_url", DEFAULT_PIN_LOOKUP_BASE_URL)
    pin_timeout_text = _env("PIN_LOOKUP_TIMEOUT") or _base("pin_lookup.timeout_seconds", "10")

    # Server
    origins_text = _env("CORS_ORIGINS") or _read_config_file("server.cors_origins") or _base("server.cors_origins")
    log_level = _env("LOG_LEVEL") or _base("server.log_level", "INFO")
    internal_text = _env("EXPOSE_INTERNAL_ROUTES") or _base("server.expose_internal_routes", "false")

    try:
        server_kwargs: dict = {"log_level": log_level, "expose_internal_routes": _truthy(internal_text)}
        if origins_text:
            server_kwargs["cors_origins"] = [o.strip() for o in str(origins_text).split(",") if o.strip()]
        cfg = AppConfig(
            database=DatabaseConfig(
                dsn=dsn,
                auto_apply_migrations=_truthy(auto_migrate_text),
                migrations_dir=Path(migrations_dir),
            ),
            schema_doc=SchemaConfig(path=Path(schema_path)),
            pin_lookup=PinLookupConfig(
                base_url=str(pin_base_url),
                timeout_seconds=float(str(pin_timeout_text).strip()),
            ),
            server=ServerConfig(**server_kwargs),
        )
        return cfg
    except (PydanticValidationError, ValueError) as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "SchemaConfig",
    "PinLookupConfig",
    "ServerConfig",
    "load_config",
]
