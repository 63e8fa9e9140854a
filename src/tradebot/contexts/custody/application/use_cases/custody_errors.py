from __future__ import annotations

from tradebot.platform.errors import ErrorKind, TradeBotError, UserMessageCategory


class WalletNotFoundError(TradeBotError):
    """
    WalletNotFoundError — user has no custodial wallet yet.
    """

    def __init__(self) -> None:
        super().__init__(
            code="wallet_not_found",
            message="Wallet not found. Please use /start to create a wallet.",
            kind=ErrorKind.USER,
            category=UserMessageCategory.WALLET,
            status_code=404,
        )


class WalletIntegrityError(TradeBotError):
    """
    WalletIntegrityError — decrypted key derives a different address than the stored one.
    """

    def __init__(self) -> None:
        super().__init__(
            code="wallet_integrity_violation",
            message="decrypted private key does not match stored wallet address",
            kind=ErrorKind.CRYPTO,
            category=UserMessageCategory.WALLET,
            status_code=500,
            user_message=(
                "Your wallet could not be unlocked. Please contact support before trading again."
            ),
        )


class InvalidPrivateKeyError(TradeBotError):
    """
    InvalidPrivateKeyError — imported private key literal is malformed or out of range.
    """

    def __init__(self) -> None:
        super().__init__(
            code="invalid_private_key",
            message="Private key must be 64 hex characters (optionally prefixed with 0x).",
            kind=ErrorKind.USER,
            category=UserMessageCategory.VALIDATION,
            status_code=422,
        )


class TokenBalancesUnavailableError(TradeBotError):
    """
    TokenBalancesUnavailableError — balance indexer failed; caller may retry later.
    """

    def __init__(self, *, message: str) -> None:
        super().__init__(
            code="token_balances_unavailable",
            message=message,
            kind=ErrorKind.NETWORK,
            category=UserMessageCategory.NETWORK,
            status_code=503,
        )
