"""
Alembic environment for the trivia bot schema.

The database URL is resolved the same way the bot resolves it:
TRIVIA_DATABASE_URL, then the bot's config file, then a local trivia.db.
Online migrations run through the async engine.

Usage:
    alembic upgrade head
    alembic revision --autogenerate -m "Add column"
"""

import asyncio
import os
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

from common.config import load_config
from common.database import normalize_database_url
from common.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

CONFIG_CANDIDATES = ('config.json', 'config.yaml', 'config.yml')


def resolve_database_url() -> str:
    """Pick the migration target URL (env var, config file, default)."""
    if 'TRIVIA_DATABASE_URL' in os.environ:
        return normalize_database_url(os.environ['TRIVIA_DATABASE_URL'])

    for name in CONFIG_CANDIDATES:
        path = Path(name)
        if path.exists():
            return normalize_database_url(load_config(str(path))['database_url'])

    return normalize_database_url('sqlite+aiosqlite:///trivia.db')


database_url = resolve_database_url()
config.set_main_option('sqlalchemy.url', database_url)


def run_migrations_offline() -> None:
    """Emit SQL for the configured URL without connecting."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=True,  # SQLite ALTER TABLE
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Connect with a non-pooled async engine and run migrations."""
    section = config.get_section(config.config_ini_section, {})
    section['sqlalchemy.url'] = database_url

    engine = async_engine_from_config(section, prefix='sqlalchemy.', poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
