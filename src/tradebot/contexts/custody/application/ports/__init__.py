from .account_factory import AccountFactory, GeneratedAccount
from .private_key_vault import KeyDecryptionError, KeyVaultConfigurationError, PrivateKeyVault
from .token_balance_source import (
    RawTokenBalance,
    TokenBalanceMetadata,
    TokenBalanceSource,
    TokenBalanceSourceError,
)
from .wallet_repository import WalletRepository

__all__ = [
    "AccountFactory",
    "GeneratedAccount",
    "KeyDecryptionError",
    "KeyVaultConfigurationError",
    "PrivateKeyVault",
    "RawTokenBalance",
    "TokenBalanceMetadata",
    "TokenBalanceSource",
    "TokenBalanceSourceError",
    "WalletRepository",
]
