"""Alembic environment for the supplier database.

The app talks to the database through async drivers; migrations run on the
matching sync driver, so any ``+asyncpg`` / ``+aiosqlite`` suffix is stripped.
"""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from api.models import Base

config = context.config


def _sync_url(url: str) -> str:
    for driver in ("+asyncpg", "+aiosqlite"):
        url = url.replace(driver, "", 1)
    return url


url = _sync_url(os.getenv("DATABASE_URL", config.get_main_option("sqlalchemy.url", "")))
if url:
    config.set_main_option("sqlalchemy.url", url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure_options() -> dict:
    # SQLite cannot ALTER most constraints in place
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(url, poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, **_configure_options())
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
