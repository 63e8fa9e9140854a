from .trade_attempt_repository import PostgresTradeAttemptRepository

__all__ = [
    "PostgresTradeAttemptRepository",
]
