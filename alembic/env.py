from __future__ import annotations

from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import Connection

from alembic import context

config = context.config

# Schema is managed by raw SQL revisions; no ORM metadata to autogenerate from.
target_metadata = None


def run_migrations_offline() -> None:
    """
    Emit tradebot migration SQL without a database connection.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        `sqlalchemy.url` is set in `alembic.ini` or via `-x`/runtime override.
    Raises:
        Exception: Alembic configuration errors.
    Side Effects:
        Writes SQL script to Alembic output buffer.
    """
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Apply tradebot migrations on the injected locked connection or a fresh one.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        `apps.migrations.main` injects the connection holding the advisory lock.
    Raises:
        Exception: Alembic or database errors.
    Side Effects:
        Changes database schema.
    """
    injected_connection = config.attributes.get("connection")
    if isinstance(injected_connection, Connection):
        context.configure(connection=injected_connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()
        return

    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
