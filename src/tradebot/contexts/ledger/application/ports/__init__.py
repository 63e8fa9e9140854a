from .trade_ledger_repository import TradeLedgerRepository

__all__ = [
    "TradeLedgerRepository",
]
