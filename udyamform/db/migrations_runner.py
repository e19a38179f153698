"""Lightweight SQL migrations runner.

Applies .sql files in lexical order from the `migrations/` directory. Skips
rollback files and records applied filenames in a `schema_migrations` journal
table so a database never reapplies the same migration. Intended for local
development and CI; production environments should use Alembic or the
platform's migration mechanism.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

_JOURNAL_DDL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    filename VARCHAR(255) PRIMARY KEY,
    applied_at VARCHAR(32) NOT NULL
)
"""


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        # Skip rollback scripts in forward runs
        if "rollback" in p.name.lower():
            continue
        yield p


def _exec_sql_compat(conn: Connection, sql: str) -> None:
    """Execute SQL text, tolerating multi-statement files on SQLite.

    SQLite's DB-API (pysqlite) does not allow multiple statements in a single
    execute() call, so for SQLite the `--` comment lines are dropped first and
    the remainder is split on ';', ignoring empty segments. Other dialects
    receive the full script as-is.
    """
    name = (getattr(conn.dialect, "name", "") or "").lower()
    if "sqlite" in name:
        body = "\n".join(ln for ln in sql.splitlines() if not ln.strip().startswith("--"))
        for stmt in body.split(";"):
            s = stmt.strip()
            if not s or s.upper() in {"BEGIN", "COMMIT", "END"}:
                continue
            conn.exec_driver_sql(s)
        return
    conn.exec_driver_sql(sql)


def _utc_now() -> str:
    # ISO-8601 UTC without fractional seconds (e.g., 2024-01-01T00:00:00Z)
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def apply_migrations(engine: Engine, migrations_dir: str | os.PathLike[str] = "migrations") -> list[str]:
    """Apply pending migrations; return the filenames applied by this call."""
    root = Path(migrations_dir)
    if not root.exists():
        logger.warning("migrations_dir_missing path=%s", root)
        return []

    applied_now: list[str] = []
    with engine.begin() as conn:
        conn.exec_driver_sql(_JOURNAL_DDL.strip())
        applied = {str(r[0]) for r in conn.execute(sql_text("SELECT filename FROM schema_migrations")).fetchall()}
        for sql_path in _iter_sql_files(root):
            fname = sql_path.name
            if fname in applied:
                continue
            sql = sql_path.read_text(encoding="utf-8")
            if not sql.strip():
                continue
            _exec_sql_compat(conn, sql)
            conn.execute(
                sql_text("INSERT INTO schema_migrations (filename, applied_at) VALUES (:f, :at)"),
                {"f": fname, "at": _utc_now()},
            )
            applied_now.append(fname)
            logger.info("migration_applied file=%s", fname)
    return applied_now
