from __future__ import annotations

from pathlib import Path

import pytest

from tradebot.platform.config import (
    resolve_tradebot_config_path,
    resolve_tradebot_runtime_settings,
)

_BASE_ENV = {
    "ENCRYPTION_KEY_BASE64": "MDEyMzQ1Njc4OWFiY2RlZjAxMjM0NTY3ODlhYmNkZWY=",
    "BASE_RPC_URL": "https://mainnet.base.org",
    "ALCHEMY_URL": "https://base-mainnet.g.alchemy.com/v2/secret",
}


def test_settings_resolve_dev_defaults_without_dsn() -> None:
    """
    Verify dev env defaults to non-fail-fast and tolerates missing Postgres DSN.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Dev wiring falls back to in-memory storage when DSN is blank.
    Raises:
        AssertionError: If resolved settings differ.
    Side Effects:
        None.
    """
    settings = resolve_tradebot_runtime_settings(environ=dict(_BASE_ENV))

    assert settings.env_name == "dev"
    assert settings.fail_fast is False
    assert settings.postgres_dsn == ""
    assert settings.zerox_api_key is None


def test_settings_require_dsn_in_prod() -> None:
    environ = {**_BASE_ENV, "TRADEBOT_ENV": "prod"}

    with pytest.raises(ValueError, match="TRADEBOT_PG_DSN"):
        resolve_tradebot_runtime_settings(environ=environ)


def test_settings_honor_explicit_fail_fast_override() -> None:
    environ = {**_BASE_ENV, "TRADEBOT_ENV": "test", "TRADEBOT_FAIL_FAST": "yes"}

    with pytest.raises(ValueError, match="fail-fast"):
        resolve_tradebot_runtime_settings(environ=environ)
    with pytest.raises(ValueError, match="boolean-like"):
        resolve_tradebot_runtime_settings(environ={**environ, "TRADEBOT_FAIL_FAST": "maybe"})


@pytest.mark.parametrize("missing_key", sorted(_BASE_ENV))
def test_settings_require_every_secret(missing_key: str) -> None:
    environ = {key: value for key, value in _BASE_ENV.items() if key != missing_key}

    with pytest.raises(ValueError, match=missing_key):
        resolve_tradebot_runtime_settings(environ=environ)


def test_settings_repr_hides_secrets() -> None:
    environ = {
        **_BASE_ENV,
        "TRADEBOT_PG_DSN": "postgresql://bot:hunter2@db/tradebot",
        "ZEROX_API_KEY": "zx-secret",
    }

    rendered = repr(resolve_tradebot_runtime_settings(environ=environ))

    assert "hunter2" not in rendered
    assert "zx-secret" not in rendered
    assert "secret" not in rendered
    assert "MDEy" not in rendered


def test_settings_reject_unknown_env_name() -> None:
    with pytest.raises(ValueError, match="TRADEBOT_ENV"):
        resolve_tradebot_runtime_settings(environ={**_BASE_ENV, "TRADEBOT_ENV": "staging"})


def test_config_path_precedence_cli_then_env_then_env_name() -> None:
    environ = {"TRADEBOT_ENV": "prod", "TRADEBOT_CONFIG_PATH": "/etc/tradebot/custom.yaml"}

    assert resolve_tradebot_config_path(
        environ=environ,
        cli_config_path="/tmp/cli.yaml",
    ) == Path("/tmp/cli.yaml")
    assert resolve_tradebot_config_path(environ=environ) == Path("/etc/tradebot/custom.yaml")
    assert resolve_tradebot_config_path(environ={"TRADEBOT_ENV": "prod"}) == Path(
        "configs/prod/tradebot.yaml"
    )
    assert resolve_tradebot_config_path(environ={}) == Path("configs/dev/tradebot.yaml")
