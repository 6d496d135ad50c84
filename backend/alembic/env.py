"""
Alembic Migration Environment
===============================

What:  Runs the RICHIEAT schema migrations (advisors, clients).
URL:   `alembic -x url=<database url> upgrade head` wins; otherwise
       richieat.config.settings.database_url. alembic.ini carries none.
How:   Online mode opens a NullPool async engine and hands the connection
       to Alembic through run_sync(). SQLite gets batch mode so ALTER
       TABLE steps are rebuilt as copy-and-swap.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import create_async_engine

from richieat.config import settings
from richieat.database import Base
from richieat.models import Advisor, Client  # noqa: F401  (registers tables)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

MANAGED_TABLES = frozenset(Base.metadata.tables)


def _database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("url") or settings.database_url


def _include_object(obj, name, type_, reflected, compare_to) -> bool:
    # Autogenerate must not propose dropping tables owned by something else.
    if type_ == "table":
        return name in MANAGED_TABLES
    return True


def _configure(url: str, **kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        include_object=_include_object,
        render_as_batch=make_url(url).get_backend_name() == "sqlite",
        **kwargs,
    )


def run_migrations_offline(url: str) -> None:
    """Print the migration SQL instead of executing it."""
    _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _run_on_connection(connection: Connection, url: str) -> None:
    _configure(url, connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_on_connection, url)
    finally:
        await engine.dispose()


database_url = _database_url()
if context.is_offline_mode():
    run_migrations_offline(database_url)
else:
    asyncio.run(run_migrations_online(database_url))
