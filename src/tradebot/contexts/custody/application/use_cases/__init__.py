from .custody_errors import (
    InvalidPrivateKeyError,
    TokenBalancesUnavailableError,
    WalletIntegrityError,
    WalletNotFoundError,
)
from .custody_models import EnsuredWallet, TokenBalanceView, WalletSigner
from .ensure_user_wallet import EnsureUserWalletUseCase
from .get_wallet_address import GetWalletAddressUseCase
from .import_user_wallet import ImportUserWalletUseCase
from .list_token_balances import ListTokenBalancesUseCase
from .resolve_signer import ResolveSignerUseCase

__all__ = [
    "EnsureUserWalletUseCase",
    "EnsuredWallet",
    "GetWalletAddressUseCase",
    "ImportUserWalletUseCase",
    "InvalidPrivateKeyError",
    "ListTokenBalancesUseCase",
    "ResolveSignerUseCase",
    "TokenBalanceView",
    "TokenBalancesUnavailableError",
    "WalletIntegrityError",
    "WalletNotFoundError",
    "WalletSigner",
]
