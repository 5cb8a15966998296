"""
Alembic environment for the feed tables.

The venue database is shared with the dashboard, which manages its own tables.
Migrations here only ever see `dj_payments` and `content_posts` and keep their
revision history in a separate version table.
"""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from db.base import Base
from db.config import normalize_postgres_url, resolve_database_timeouts, resolve_database_url
from db.models import ContentPost, DJPayment

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

FEED_TABLES = frozenset({DJPayment.__tablename__, ContentPost.__tablename__})
VERSION_TABLE = "feed_sync_alembic_version"


def _migration_url() -> str:
    """
    `-x db_url=...` for a one-off target, otherwise the application's URL.
    """

    override = (context.get_x_argument(as_dictionary=True).get("db_url") or "").strip()
    url = normalize_postgres_url(override) if override else resolve_database_url()
    if not url.startswith("postgresql"):
        raise RuntimeError("Feed table migrations only target PostgreSQL.")
    return url


def _include_object(obj, name, type_, reflected, compare_to) -> bool:
    if type_ == "table":
        return name in FEED_TABLES
    table = getattr(obj, "table", None)
    return table is None or table.name in FEED_TABLES


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        include_object=_include_object,
        version_table=VERSION_TABLE,
        compare_type=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(url=_migration_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    timeouts = resolve_database_timeouts()
    engine = create_engine(
        _migration_url(),
        poolclass=pool.NullPool,
        connect_args={"connect_timeout": timeouts.connect_timeout_seconds},
    )
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
