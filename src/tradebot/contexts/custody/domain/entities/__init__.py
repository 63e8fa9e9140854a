from .user_wallet import UserWallet

__all__ = [
    "UserWallet",
]
