"""
Shared environment-driven database configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.is_file():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            if key.startswith("export "):
                key = key[len("export ") :].strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def normalize_postgres_url(url: str) -> str:
    """
    Normalize postgres URLs to SQLAlchemy's psycopg driver form.
    """

    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix) :]
    return url


def resolve_database_url() -> str:
    """
    Resolve the venue database URL.

    Priority:
    1) DATABASE_URL
    2) SUPABASE_DB_URL (the hosted Postgres behind the dashboard)
    """

    load_env_files()

    for name in ("DATABASE_URL", "SUPABASE_DB_URL"):
        value = (os.getenv(name) or "").strip()
        if value:
            return normalize_postgres_url(value)

    raise RuntimeError(
        "No database URL configured. Set DATABASE_URL or SUPABASE_DB_URL."
    )


@dataclass(frozen=True)
class DatabaseTimeouts:
    """
    Bounded waits for every datastore round-trip made during a sync run.
    """

    connect_timeout_seconds: int = 10
    statement_timeout_ms: int = 15000
    pool_timeout_seconds: int = 10


def resolve_database_timeouts() -> DatabaseTimeouts:
    load_env_files()

    def _int(name: str, default: int) -> int:
        raw = os.getenv(name)
        if raw is None:
            return default
        try:
            return max(1, int(raw))
        except ValueError:
            return default

    return DatabaseTimeouts(
        connect_timeout_seconds=_int("DB_CONNECT_TIMEOUT_SECONDS", 10),
        statement_timeout_ms=_int("DB_STATEMENT_TIMEOUT_MS", 15000),
        pool_timeout_seconds=_int("DB_POOL_TIMEOUT_SECONDS", 10),
    )
