from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

ENV_NAME_KEY = "TRADEBOT_ENV"
FAIL_FAST_KEY = "TRADEBOT_FAIL_FAST"
CONFIG_PATH_KEY = "TRADEBOT_CONFIG_PATH"
PG_DSN_KEY = "TRADEBOT_PG_DSN"
ENCRYPTION_KEY_KEY = "ENCRYPTION_KEY_BASE64"
RPC_URL_KEY = "BASE_RPC_URL"
ZEROX_API_KEY_KEY = "ZEROX_API_KEY"
ALCHEMY_URL_KEY = "ALCHEMY_URL"
_ALLOWED_ENVS = ("dev", "prod", "test")


@dataclass(frozen=True, slots=True)
class TradeBotRuntimeSettings:
    """
    TradeBotRuntimeSettings — environment-sourced secrets and storage policy.

    Secret fields are excluded from `repr` so settings can be logged safely.

    Related:
      - apps/api/wiring/modules/tradebot.py
      - apps/worker/trade_reconciler/wiring/modules/trade_reconciler.py
      - src/tradebot/contexts/execution/adapters/outbound/config/trade_execution_runtime_config.py
    """

    env_name: str
    fail_fast: bool
    postgres_dsn: str = field(repr=False)
    encryption_key_b64: str = field(repr=False)
    rpc_url: str = field(repr=False)
    alchemy_url: str = field(repr=False)
    zerox_api_key: str | None = field(repr=False)

    def __post_init__(self) -> None:
        """
        Validate settings invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Settings are normalized by resolver before dataclass construction.
        Raises:
            ValueError: If env name is unknown or a required secret is blank.
        Side Effects:
            None.
        """
        if self.env_name not in _ALLOWED_ENVS:
            raise ValueError(
                f"TradeBotRuntimeSettings.env_name must be one of {_ALLOWED_ENVS}, "
                f"got {self.env_name!r}"
            )
        if not self.encryption_key_b64:
            raise ValueError(f"{ENCRYPTION_KEY_KEY} is required")
        if not self.rpc_url:
            raise ValueError(f"{RPC_URL_KEY} is required")
        if not self.alchemy_url:
            raise ValueError(f"{ALCHEMY_URL_KEY} is required")


def resolve_tradebot_runtime_settings(*, environ: Mapping[str, str]) -> TradeBotRuntimeSettings:
    """
    Resolve runtime settings with environment-aware fail-fast policy.

    Args:
        environ: Runtime environment mapping.
    Returns:
        TradeBotRuntimeSettings: Normalized settings object.
    Assumptions:
        Missing `TRADEBOT_ENV` defaults to `dev`; Postgres DSN is mandatory under fail-fast.
    Raises:
        ValueError: If env values are invalid or required values are missing.
    Side Effects:
        None.
    """
    env_name = resolve_env_name(environ=environ)
    fail_fast = _resolve_fail_fast(environ=environ, env_name=env_name)
    postgres_dsn = environ.get(PG_DSN_KEY, "").strip()
    if fail_fast and not postgres_dsn:
        raise ValueError(f"{PG_DSN_KEY} is required when tradebot fail-fast mode is enabled")
    zerox_api_key = environ.get(ZEROX_API_KEY_KEY, "").strip()

    return TradeBotRuntimeSettings(
        env_name=env_name,
        fail_fast=fail_fast,
        postgres_dsn=postgres_dsn,
        encryption_key_b64=environ.get(ENCRYPTION_KEY_KEY, "").strip(),
        rpc_url=environ.get(RPC_URL_KEY, "").strip(),
        alchemy_url=environ.get(ALCHEMY_URL_KEY, "").strip(),
        zerox_api_key=zerox_api_key or None,
    )


def resolve_tradebot_config_path(
    *,
    environ: Mapping[str, str],
    cli_config_path: str | Path | None = None,
) -> Path:
    """
    Resolve runtime YAML path using CLI/env/fallback precedence.

    Args:
        environ: Runtime environment mapping.
        cli_config_path: Optional explicit CLI override path.
    Returns:
        Path: Resolved path to runtime config.
    Assumptions:
        Precedence is CLI `--config` > `TRADEBOT_CONFIG_PATH` > `configs/<env>/tradebot.yaml`.
    Raises:
        ValueError: If `TRADEBOT_ENV` value is invalid.
    Side Effects:
        None.
    """
    if cli_config_path is not None:
        raw_cli_path = str(cli_config_path).strip()
        if raw_cli_path:
            return Path(raw_cli_path)

    override_path = environ.get(CONFIG_PATH_KEY, "").strip()
    if override_path:
        return Path(override_path)

    env_name = resolve_env_name(environ=environ)
    return Path("configs") / env_name / "tradebot.yaml"


def resolve_env_name(*, environ: Mapping[str, str]) -> str:
    raw_env = environ.get(ENV_NAME_KEY, "dev").strip().lower()
    if raw_env not in _ALLOWED_ENVS:
        raise ValueError(f"{ENV_NAME_KEY} must be one of {_ALLOWED_ENVS}, got {raw_env!r}")
    return raw_env


def _resolve_fail_fast(*, environ: Mapping[str, str], env_name: str) -> bool:
    """
    Resolve fail-fast mode from explicit override or environment default policy.

    Args:
        environ: Runtime environment mapping.
        env_name: Normalized environment name.
    Returns:
        bool: True when fail-fast mode should be enabled.
    Assumptions:
        Default policy enables fail-fast in `prod` and disables in `dev`/`test`.
    Raises:
        ValueError: If explicit override value is invalid.
    Side Effects:
        None.
    """
    raw_value = environ.get(FAIL_FAST_KEY)
    if raw_value is None:
        return env_name == "prod"

    normalized = raw_value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"{FAIL_FAST_KEY} must be boolean-like value, got {raw_value!r}")
