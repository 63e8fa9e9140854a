from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Mapping

from psycopg.conninfo import conninfo_to_dict
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Connection
from sqlalchemy.engine.url import make_url

from alembic import command
from alembic.config import Config

log = logging.getLogger(__name__)

_DSN_ENV = "TRADEBOT_PG_DSN"
_DEFAULT_LOCK_KEY = 80453120917
_URL_DRIVERS = frozenset({"postgresql", "postgres", "postgresql+psycopg"})
_CONNINFO_URL_FIELDS = frozenset({"dbname", "host", "hostaddr", "password", "port", "user"})


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tradebot-migrations")
    parser.add_argument(
        "--dsn",
        default="",
        help=f"Postgres DSN. Falls back to ${_DSN_ENV} when omitted.",
    )
    parser.add_argument(
        "--lock-key",
        type=int,
        default=_DEFAULT_LOCK_KEY,
        help="pg_advisory_lock key held while `alembic upgrade head` runs.",
    )
    return parser


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def resolve_migration_dsn(*, arg_dsn: str, environ: Mapping[str, str]) -> str:
    """
    Resolve Postgres DSN from CLI flag first, then `TRADEBOT_PG_DSN`.

    Args:
        arg_dsn: CLI `--dsn` value.
        environ: Environment mapping.
    Returns:
        str: Non-empty DSN.
    Assumptions:
        Same environment key is read by the API and the trade reconciler.
    Raises:
        ValueError: If neither source provides a DSN.
    Side Effects:
        None.
    """
    dsn = arg_dsn.strip() or environ.get(_DSN_ENV, "").strip()
    if not dsn:
        raise ValueError(f"Migration DSN is required via --dsn or {_DSN_ENV}")
    return dsn


def to_sqlalchemy_url(*, dsn: str) -> URL:
    """
    Normalize URL-style or libpq keyword/value DSN into a `postgresql+psycopg` SQLAlchemy URL.

    Args:
        dsn: Raw Postgres DSN.
    Returns:
        URL: SQLAlchemy URL bound to the psycopg driver.
    Assumptions:
        Strings containing `://` are URLs; anything else is libpq conninfo.
    Raises:
        ValueError: If DSN is blank, uses a foreign driver, or is malformed conninfo.
    Side Effects:
        None.
    """
    normalized = dsn.strip()
    if not normalized:
        raise ValueError("Postgres DSN cannot be empty")

    if "://" in normalized:
        parsed = make_url(normalized)
        if parsed.drivername not in _URL_DRIVERS:
            raise ValueError("Postgres URL DSN must use postgresql:// or postgres:// scheme")
        return parsed.set(drivername="postgresql+psycopg")

    try:
        fields = conninfo_to_dict(normalized)
    except Exception as error:  # noqa: BLE001
        raise ValueError("Postgres DSN must be URL or libpq conninfo format") from error

    raw_port = str(fields.get("port", "")).strip()
    try:
        port = int(raw_port) if raw_port else None
    except ValueError as error:
        raise ValueError("Conninfo port must be numeric when provided") from error

    return URL.create(
        "postgresql+psycopg",
        username=_optional_field(fields=fields, key="user"),
        password=_optional_field(fields=fields, key="password"),
        host=_optional_field(fields=fields, key="host")
        or _optional_field(fields=fields, key="hostaddr"),
        port=port,
        database=_optional_field(fields=fields, key="dbname"),
        query={
            key: str(value)
            for key, value in sorted(fields.items())
            if key not in _CONNINFO_URL_FIELDS and str(value)
        },
    )


def _optional_field(*, fields: Mapping[str, object], key: str) -> str | None:
    return str(fields.get(key, "")).strip() or None


def _build_alembic_config(*, repo_root: Path) -> Config:
    alembic_ini = repo_root / "alembic.ini"
    if not alembic_ini.exists():
        raise ValueError(f"Missing Alembic config file: {alembic_ini}")
    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(repo_root / "alembic"))
    return config


def _upgrade_head_under_lock(*, config: Config, sqlalchemy_url: URL, lock_key: int) -> None:
    """
    Run `alembic upgrade head` on one connection that holds `pg_advisory_lock(lock_key)`.

    Args:
        config: Prepared Alembic config.
        sqlalchemy_url: Target database URL.
        lock_key: Advisory lock key shared by all migration runners.
    Returns:
        None.
    Assumptions:
        `alembic/env.py` picks the injected connection from `config.attributes`.
    Raises:
        Exception: Any DB or Alembic failure, after rollback and unlock.
    Side Effects:
        Applies schema migrations.
    """
    engine = create_engine(sqlalchemy_url, pool_pre_ping=True)
    with engine.connect() as connection:
        _advisory_lock(connection=connection, lock_key=lock_key, acquire=True)
        try:
            config.attributes["connection"] = connection
            log.info("tradebot migrations upgrading to head")
            command.upgrade(config, "head")
            connection.commit()
        except Exception:  # noqa: BLE001
            connection.rollback()
            raise
        finally:
            _advisory_lock(connection=connection, lock_key=lock_key, acquire=False)
            connection.commit()
    engine.dispose()


def _advisory_lock(*, connection: Connection, lock_key: int, acquire: bool) -> None:
    function_name = "pg_advisory_lock" if acquire else "pg_advisory_unlock"
    log.info("tradebot migrations %s key=%s", function_name, lock_key)
    connection.execute(text(f"SELECT {function_name}(:lock_key)"), {"lock_key": lock_key})


def main(argv: list[str] | None = None) -> int:
    """
    Apply all pending tradebot migrations and exit.

    Args:
        argv: Optional CLI argument list without program name.
    Returns:
        int: Zero on success, one on any failure.
    Assumptions:
        Deploy pipelines run this before starting the API and the reconciler.
    Raises:
        None.
    Side Effects:
        Reads environment, connects to Postgres, writes logs.
    """
    _configure_logging()
    args = _build_parser().parse_args(argv)
    try:
        dsn = resolve_migration_dsn(arg_dsn=args.dsn, environ=os.environ)
        config = _build_alembic_config(repo_root=Path(__file__).resolve().parents[2])
        _upgrade_head_under_lock(
            config=config,
            sqlalchemy_url=to_sqlalchemy_url(dsn=dsn),
            lock_key=args.lock_key,
        )
    except Exception:  # noqa: BLE001
        log.exception("tradebot migrations failed")
        return 1
    log.info("tradebot migrations completed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
