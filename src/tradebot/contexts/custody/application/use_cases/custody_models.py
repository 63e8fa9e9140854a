from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from tradebot.shared_kernel.primitives import EvmAddress, UserId


@dataclass(frozen=True, slots=True)
class WalletSigner:
    """
    WalletSigner — decrypted signing material for one in-flight trade.

    Instances live only for the duration of a trade; the private key is excluded from `repr`
    so accidental logging of the object never leaks it.
    """

    user_id: UserId
    address: EvmAddress
    private_key_hex: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class EnsuredWallet:
    """
    EnsuredWallet — result of first-contact wallet provisioning.
    """

    address: EvmAddress
    created: bool


@dataclass(frozen=True, slots=True)
class TokenBalanceView:
    """
    TokenBalanceView — display-ready ERC-20 balance of a custodial wallet.
    """

    contract_address: EvmAddress
    symbol: str
    name: str
    decimals: int
    balance: Decimal
