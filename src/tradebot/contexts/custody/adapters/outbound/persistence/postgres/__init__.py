from .wallet_repository import PostgresWalletRepository

__all__ = [
    "PostgresWalletRepository",
]
