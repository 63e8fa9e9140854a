from .modules import TradeBotApiModule, TradeExecutionMetrics, build_tradebot_api_module

__all__ = [
    "TradeBotApiModule",
    "TradeExecutionMetrics",
    "build_tradebot_api_module",
]
