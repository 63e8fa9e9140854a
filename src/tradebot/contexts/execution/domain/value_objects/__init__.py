from .trade_attempt_status import TradeAttemptStatus, can_transition
from .trade_side import NATIVE_ASSET_SENTINEL, TradeSide

__all__ = [
    "NATIVE_ASSET_SENTINEL",
    "TradeAttemptStatus",
    "TradeSide",
    "can_transition",
]
