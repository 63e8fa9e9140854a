from .trade_ledger_repository import PostgresTradeLedgerRepository

__all__ = [
    "PostgresTradeLedgerRepository",
]
