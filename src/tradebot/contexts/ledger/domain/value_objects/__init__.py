from .order_type import OrderType

__all__ = [
    "OrderType",
]
