from .trade_attempt_repository import InMemoryTradeAttemptRepository

__all__ = [
    "InMemoryTradeAttemptRepository",
]
