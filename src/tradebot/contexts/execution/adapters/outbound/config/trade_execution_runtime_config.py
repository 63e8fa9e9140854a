from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

_DEFAULT_QUOTE_URL = "https://api.0x.org/swap/allowance-holder/quote"
_DEFAULT_PRICE_URL = "https://api.dexscreener.com/latest/dex"


@dataclass(frozen=True, slots=True)
class ChainRuntimeConfig:
    """
    ChainRuntimeConfig — chain id and RPC behavior of the trading chain.
    """

    chain_id: int
    request_timeout_s: float
    receipt_timeout_s: float

    def __post_init__(self) -> None:
        if self.chain_id <= 0:
            raise ValueError("tradebot.chain.chain_id must be > 0")
        if self.request_timeout_s <= 0:
            raise ValueError("tradebot.chain.request_timeout_s must be > 0")
        if self.receipt_timeout_s <= 0:
            raise ValueError("tradebot.chain.receipt_timeout_s must be > 0")


@dataclass(frozen=True, slots=True)
class HttpSourceRuntimeConfig:
    """
    HttpSourceRuntimeConfig — base URL and timeout of one outbound HTTP data source.
    """

    url: str
    timeout_s: float

    def __post_init__(self) -> None:
        if not self.url.startswith(("https://", "http://")):
            raise ValueError("tradebot http source url must start with http:// or https://")
        if self.timeout_s <= 0:
            raise ValueError("tradebot http source timeout_s must be > 0")


@dataclass(frozen=True, slots=True)
class BalancesRuntimeConfig:
    """
    BalancesRuntimeConfig — wallet balance listing behavior.
    """

    timeout_s: float
    max_workers: int
    spam_filter_enabled: bool

    def __post_init__(self) -> None:
        if self.timeout_s <= 0:
            raise ValueError("tradebot.balances.timeout_s must be > 0")
        if self.max_workers <= 0:
            raise ValueError("tradebot.balances.max_workers must be > 0")


@dataclass(frozen=True, slots=True)
class ReconcilerRuntimeConfig:
    """
    ReconcilerRuntimeConfig — polling cadence and scope of the trade reconciler worker.
    """

    poll_interval_seconds: int
    stale_after_s: float
    batch_size: int
    metrics_port: int

    def __post_init__(self) -> None:
        if self.poll_interval_seconds <= 0:
            raise ValueError("tradebot.reconciler.poll_interval_seconds must be > 0")
        if self.stale_after_s <= 0:
            raise ValueError("tradebot.reconciler.stale_after_s must be > 0")
        if self.batch_size <= 0:
            raise ValueError("tradebot.reconciler.batch_size must be > 0")
        if self.metrics_port <= 0:
            raise ValueError("tradebot.reconciler.metrics_port must be > 0")


@dataclass(frozen=True, slots=True)
class TradeExecutionRuntimeConfig:
    """
    TradeExecutionRuntimeConfig — top-level non-secret runtime config for API and workers.

    Secrets (encryption key, RPC URL, API keys, DSN) are read from environment by process
    wiring and never appear here.

    Related:
      - apps/api/wiring/modules/tradebot.py
      - apps/worker/trade_reconciler/wiring/modules/trade_reconciler.py
      - configs/dev/tradebot.yaml
    """

    version: int
    chain: ChainRuntimeConfig
    quote: HttpSourceRuntimeConfig
    price: HttpSourceRuntimeConfig
    balances: BalancesRuntimeConfig
    history_default_limit: int
    reconciler: ReconcilerRuntimeConfig

    def __post_init__(self) -> None:
        """
        Validate cross-section invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Reconciler must never touch attempts whose receipt wait is still running.
        Raises:
            ValueError: If history limit or reconciler staleness is invalid.
        Side Effects:
            None.
        """
        if not 1 <= self.history_default_limit <= 500:
            raise ValueError("tradebot.ledger.history_default_limit must be in [1, 500]")
        if self.reconciler.stale_after_s <= self.chain.receipt_timeout_s:
            raise ValueError(
                "tradebot.reconciler.stale_after_s must be > tradebot.chain.receipt_timeout_s"
            )


def load_trade_execution_runtime_config(path: str | Path) -> TradeExecutionRuntimeConfig:
    """
    Load and validate tradebot runtime YAML config.

    Args:
        path: Path to `tradebot.yaml`.
    Returns:
        TradeExecutionRuntimeConfig: Parsed runtime config.
    Assumptions:
        YAML has top-level `version` and `tradebot` mapping; every section is optional.
    Raises:
        FileNotFoundError: If config path does not exist.
        ValueError: If YAML shape/values are invalid.
    Side Effects:
        Reads one config file from disk.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"tradebot config not found: {config_path}")

    payload = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if not isinstance(payload, Mapping):
        raise ValueError("tradebot config must be mapping at top-level")
    return build_trade_execution_runtime_config(payload)


def build_trade_execution_runtime_config(
    payload: Mapping[str, Any],
) -> TradeExecutionRuntimeConfig:
    """
    Build runtime config from already parsed mapping.

    Args:
        payload: Top-level config mapping.
    Returns:
        TradeExecutionRuntimeConfig: Parsed runtime config.
    Assumptions:
        Missing keys take production defaults for Base mainnet.
    Raises:
        ValueError: If mapping shape/values are invalid.
    Side Effects:
        None.
    """
    version = _get_int(payload, "version", required=True)
    root_map = _get_mapping(payload, "tradebot", required=True)
    chain_map = _get_mapping(root_map, "chain", required=False)
    quote_map = _get_mapping(root_map, "quote", required=False)
    price_map = _get_mapping(root_map, "price", required=False)
    balances_map = _get_mapping(root_map, "balances", required=False)
    ledger_map = _get_mapping(root_map, "ledger", required=False)
    reconciler_map = _get_mapping(root_map, "reconciler", required=False)

    return TradeExecutionRuntimeConfig(
        version=version,
        chain=ChainRuntimeConfig(
            chain_id=_get_int_with_default(chain_map, "chain_id", default=8453),
            request_timeout_s=_get_float_with_default(
                chain_map,
                "request_timeout_s",
                default=15.0,
            ),
            receipt_timeout_s=_get_float_with_default(
                chain_map,
                "receipt_timeout_s",
                default=120.0,
            ),
        ),
        quote=HttpSourceRuntimeConfig(
            url=_get_str_with_default(quote_map, "url", default=_DEFAULT_QUOTE_URL),
            timeout_s=_get_float_with_default(quote_map, "timeout_s", default=10.0),
        ),
        price=HttpSourceRuntimeConfig(
            url=_get_str_with_default(price_map, "url", default=_DEFAULT_PRICE_URL),
            timeout_s=_get_float_with_default(price_map, "timeout_s", default=5.0),
        ),
        balances=BalancesRuntimeConfig(
            timeout_s=_get_float_with_default(balances_map, "timeout_s", default=10.0),
            max_workers=_get_int_with_default(balances_map, "max_workers", default=8),
            spam_filter_enabled=_get_bool_with_default(
                balances_map,
                "spam_filter_enabled",
                default=True,
            ),
        ),
        history_default_limit=_get_int_with_default(
            ledger_map,
            "history_default_limit",
            default=20,
        ),
        reconciler=ReconcilerRuntimeConfig(
            poll_interval_seconds=_get_int_with_default(
                reconciler_map,
                "poll_interval_seconds",
                default=30,
            ),
            stale_after_s=_get_float_with_default(
                reconciler_map,
                "stale_after_s",
                default=300.0,
            ),
            batch_size=_get_int_with_default(reconciler_map, "batch_size", default=100),
            metrics_port=_get_int_with_default(reconciler_map, "metrics_port", default=9203),
        ),
    )


def _get_mapping(data: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    """
    Read nested mapping config value.

    Args:
        data: Source mapping.
        key: Nested key name.
        required: Whether key is required.
    Returns:
        Mapping[str, Any]: Nested mapping or empty mapping when optional and absent.
    Assumptions:
        None.
    Raises:
        ValueError: If required key missing or value is not a mapping.
    Side Effects:
        None.
    """
    value = data.get(key)
    if value is None:
        if required:
            raise ValueError(f"missing required key: {key}")
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"expected mapping at key '{key}', got {type(value).__name__}")
    return value


def _get_int(data: Mapping[str, Any], key: str, *, required: bool) -> int:
    """
    Read integer config value with bool rejection.

    Args:
        data: Source mapping.
        key: Integer key name.
        required: Whether key is required.
    Returns:
        int: Parsed integer value.
    Assumptions:
        Bool values are rejected even though bool subclasses int.
    Raises:
        ValueError: If required key missing or value type is invalid.
    Side Effects:
        None.
    """
    value = data.get(key)
    if value is None:
        if required:
            raise ValueError(f"missing required key: {key}")
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected int at key '{key}', got {type(value).__name__}")
    return value


def _get_int_with_default(data: Mapping[str, Any], key: str, *, default: int) -> int:
    if key not in data:
        return default
    return _get_int(data, key, required=True)


def _get_float_with_default(data: Mapping[str, Any], key: str, *, default: float) -> float:
    """
    Read optional float config value with explicit default.

    Args:
        data: Source mapping.
        key: Float key name.
        default: Value used when key is absent.
    Returns:
        float: Parsed float value.
    Assumptions:
        Integer values are accepted and converted to float.
    Raises:
        ValueError: If present value is not numeric.
    Side Effects:
        None.
    """
    if key not in data:
        return default
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected float at key '{key}', got {type(value).__name__}")
    return float(value)


def _get_str_with_default(data: Mapping[str, Any], key: str, *, default: str) -> str:
    if key not in data:
        return default
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"expected string at key '{key}', got {type(value).__name__}")
    normalized = value.strip()
    if not normalized:
        raise ValueError(f"key '{key}' must be non-empty")
    return normalized


def _get_bool_with_default(data: Mapping[str, Any], key: str, *, default: bool) -> bool:
    if key not in data:
        return default
    value = data[key]
    if not isinstance(value, bool):
        raise ValueError(f"expected bool at key '{key}', got {type(value).__name__}")
    return value
