from .tradebot_runtime_settings import (
    TradeBotRuntimeSettings,
    resolve_env_name,
    resolve_tradebot_config_path,
    resolve_tradebot_runtime_settings,
)

__all__ = [
    "TradeBotRuntimeSettings",
    "resolve_env_name",
    "resolve_tradebot_config_path",
    "resolve_tradebot_runtime_settings",
]
