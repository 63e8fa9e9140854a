from .entities import PLACEHOLDER_SYMBOL, AssetDescription, SwapQuote, TradeAttempt
from .value_objects import NATIVE_ASSET_SENTINEL, TradeAttemptStatus, TradeSide, can_transition

__all__ = [
    "AssetDescription",
    "NATIVE_ASSET_SENTINEL",
    "PLACEHOLDER_SYMBOL",
    "SwapQuote",
    "TradeAttempt",
    "TradeAttemptStatus",
    "TradeSide",
    "can_transition",
]
