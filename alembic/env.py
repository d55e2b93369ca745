"""
Alembic environment configuration for database migrations.

Handles both online and offline migration modes with async support and
reads the database URL from the application's DatabaseConfig.
"""

import asyncio
import contextlib
import os
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context
from prsentry.database.config import DatabaseConfig
from prsentry.models import Base

# This is the Alembic Config object
config = context.config

# Interpret the config file for Python logging
if config.config_file_name is not None:
    with contextlib.suppress(KeyError):
        # Skip logging configuration if the ini file has no logging sections
        fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_database_url() -> str:
    """
    Get database URL for migrations.

    Prioritizes the application configuration (DATABASE_* variables), then
    alembic.ini. Returns a sync URL for Alembic compatibility.
    """
    db_config = DatabaseConfig()
    if db_config.database_url:
        return db_config.get_alembic_url()

    fallback_url = config.get_main_option("sqlalchemy.url")
    return fallback_url or "postgresql://localhost/prsentry"


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode.

    This configures the context with just a URL and not an Engine. Calls to
    context.execute() here emit the given string to the script output.
    """
    url = get_database_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Run migrations with the provided connection."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=True,  # SQLite needs batch mode for ALTER TABLE
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """
    Run migrations in async 'online' mode.

    Creates an async engine and runs migrations within an async context.
    """
    database_url = get_database_url()
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://")
    elif database_url.startswith("sqlite://"):
        database_url = database_url.replace("sqlite://", "sqlite+aiosqlite://")

    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = database_url

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_sync_migrations() -> None:
    """Run migrations in synchronous mode."""
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = get_database_url()

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        do_run_migrations(connection)


def run_migrations_online() -> None:
    """
    Run migrations in 'online' mode.

    Async by default; set ALEMBIC_ASYNC=false to use a sync driver.
    """
    if os.getenv("ALEMBIC_ASYNC", "true").lower() == "true":
        try:
            # Called from inside a running loop (e.g. tests): stay synchronous
            asyncio.get_running_loop()
            run_sync_migrations()
        except RuntimeError:
            asyncio.run(run_async_migrations())
    else:
        run_sync_migrations()


# Determine run mode and execute
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
