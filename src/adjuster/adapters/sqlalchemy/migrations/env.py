"""Alembic environment configuration for the adjuster changeset table."""

from __future__ import annotations

import logging

from alembic import context
from sqlalchemy import create_engine, pool

from adjuster.adapters.sqlalchemy.mappings import adjustment_table
from adjuster.adapters.sqlalchemy.migrations import ADJUSTER_CONFIG_ATTRIBUTE
from adjuster.config import get_adjuster_config, get_database_config

config = context.config

if not logging.getLogger().handlers:
    logging.basicConfig(level=logging.INFO)

log = logging.getLogger("alembic.env")

adjuster_config = config.attributes.get(ADJUSTER_CONFIG_ATTRIBUTE) or get_adjuster_config()
config.attributes[ADJUSTER_CONFIG_ATTRIBUTE] = adjuster_config
target_metadata = adjustment_table(adjuster_config).metadata


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""

    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=True,
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""

    existing_connection = config.attributes.get("connection")
    if existing_connection is not None:
        context.configure(
            connection=existing_connection,
            target_metadata=target_metadata,
            render_as_batch=True,
            compare_type=True,
            compare_server_default=True,
        )

        with context.begin_transaction():
            context.run_migrations()
        return

    engine = create_engine(_database_url(), poolclass=pool.NullPool, future=True)
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                render_as_batch=True,
                compare_type=True,
                compare_server_default=True,
            )

            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
