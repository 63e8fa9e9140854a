from .entities import Holding, TradeRecord
from .services import derive_holdings
from .value_objects import OrderType

__all__ = [
    "Holding",
    "OrderType",
    "TradeRecord",
    "derive_holdings",
]
