from .wallet_repository import InMemoryWalletRepository

__all__ = [
    "InMemoryWalletRepository",
]
