from .holding import Holding
from .trade_record import TradeRecord

__all__ = [
    "Holding",
    "TradeRecord",
]
