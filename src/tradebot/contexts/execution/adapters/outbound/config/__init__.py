from .trade_execution_runtime_config import (
    BalancesRuntimeConfig,
    ChainRuntimeConfig,
    HttpSourceRuntimeConfig,
    ReconcilerRuntimeConfig,
    TradeExecutionRuntimeConfig,
    build_trade_execution_runtime_config,
    load_trade_execution_runtime_config,
)

__all__ = [
    "BalancesRuntimeConfig",
    "ChainRuntimeConfig",
    "HttpSourceRuntimeConfig",
    "ReconcilerRuntimeConfig",
    "TradeExecutionRuntimeConfig",
    "build_trade_execution_runtime_config",
    "load_trade_execution_runtime_config",
]
