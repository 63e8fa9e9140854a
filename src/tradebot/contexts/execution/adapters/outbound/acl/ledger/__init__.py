from .ledger_trade_recorder import LedgerTradeRecorder

__all__ = [
    "LedgerTradeRecorder",
]
