from .asset_description import PLACEHOLDER_SYMBOL, AssetDescription
from .swap_quote import SwapQuote
from .trade_attempt import TradeAttempt

__all__ = [
    "AssetDescription",
    "PLACEHOLDER_SYMBOL",
    "SwapQuote",
    "TradeAttempt",
]
