"""
Pydantic models and mappers for wallet API endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from tradebot.contexts.custody.application.use_cases import EnsuredWallet, TokenBalanceView


class WalletCreateRequest(BaseModel):
    """
    API request model for first-contact wallet creation.
    """

    model_config = ConfigDict(extra="forbid")

    username: str | None = Field(default=None, max_length=64)


class WalletImportRequest(BaseModel):
    """
    API request model for replacing the wallet with an imported private key.

    The key is held as `SecretStr` so it never appears in reprs or validation logs.
    """

    model_config = ConfigDict(extra="forbid")

    private_key: SecretStr


class WalletResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    address: str
    created: bool


class WalletAddressResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    address: str


class TokenBalanceResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    contract_address: str
    symbol: str
    name: str
    decimals: int
    balance: str


class TokenBalancesResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: list[TokenBalanceResponse]


def build_wallet_response(*, wallet: EnsuredWallet) -> WalletResponse:
    return WalletResponse(address=str(wallet.address), created=wallet.created)


def build_token_balances_response(
    *,
    balances: tuple[TokenBalanceView, ...],
) -> TokenBalancesResponse:
    """
    Map balance views into API response preserving indexer order.

    Args:
        balances: Display-ready balances.
    Returns:
        TokenBalancesResponse: Response payload.
    Assumptions:
        Balances are rendered as plain decimal strings without exponent.
    Raises:
        None.
    Side Effects:
        None.
    """
    return TokenBalancesResponse(
        items=[
            TokenBalanceResponse(
                contract_address=str(item.contract_address),
                symbol=item.symbol,
                name=item.name,
                decimals=item.decimals,
                balance=format(item.balance, "f"),
            )
            for item in balances
        ]
    )
