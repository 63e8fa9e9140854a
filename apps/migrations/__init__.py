"""Tradebot schema migration runner."""

from apps.migrations.main import resolve_migration_dsn, to_sqlalchemy_url

__all__ = [
    "resolve_migration_dsn",
    "to_sqlalchemy_url",
]
