from .ledger_errors import LedgerValidationError
from .list_holdings import ListHoldingsUseCase
from .list_trade_history import (
    DEFAULT_HISTORY_LIMIT,
    MAX_HISTORY_LIMIT,
    ListTradeHistoryUseCase,
)
from .record_trade import RecordTradeUseCase

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "LedgerValidationError",
    "ListHoldingsUseCase",
    "ListTradeHistoryUseCase",
    "MAX_HISTORY_LIMIT",
    "RecordTradeUseCase",
]
