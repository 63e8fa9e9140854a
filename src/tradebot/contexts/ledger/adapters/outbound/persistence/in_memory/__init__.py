from .trade_ledger_repository import InMemoryTradeLedgerRepository

__all__ = [
    "InMemoryTradeLedgerRepository",
]
