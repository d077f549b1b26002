"""Alembic environment configuration.

The DB URL comes from ``mutuals.core.settings.Settings`` unless overridden
with ``-x db_url=...``. Both offline and online (async engine) migrations are
supported, and autogenerate compares against the models' metadata.
"""

from __future__ import annotations

import asyncio
from logging.config import fileConfig
from typing import Any, Dict

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from mutuals.core.settings import get_settings
from mutuals.db.postgres.session import Base

# Import all models so they register with Base.metadata
from mutuals.features.matches import models as matches_models  # noqa: F401
from mutuals.features.users import models as users_models  # noqa: F401

# Alembic Config object, provides access to the .ini file
config = context.config

# Interpret the config file for Python logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

settings = get_settings()

# Allow overriding DB URL via `-x db_url=...`
x_args: Dict[str, Any] = context.get_x_argument(as_dictionary=True)
db_url: str = x_args.get("db_url") or settings.database_url
config.set_main_option("sqlalchemy.url", db_url)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode with async engine."""
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section) or {},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async def do_run_migrations() -> None:
        async with connectable.connect() as connection:
            await connection.run_sync(_run_sync_migrations)
        await connectable.dispose()

    def _run_sync_migrations(connection: Connection) -> None:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()

    asyncio.run(do_run_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
