from .ledger import build_ledger_router
from .trades import build_trades_router
from .wallets import build_wallets_router

__all__ = [
    "build_ledger_router",
    "build_trades_router",
    "build_wallets_router",
]
