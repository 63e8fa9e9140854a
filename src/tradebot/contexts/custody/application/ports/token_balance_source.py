from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from tradebot.shared_kernel.primitives import EvmAddress


@dataclass(frozen=True, slots=True)
class RawTokenBalance:
    """
    RawTokenBalance — one ERC-20 contract balance in smallest units.
    """

    contract_address: EvmAddress
    raw_balance: int


@dataclass(frozen=True, slots=True)
class TokenBalanceMetadata:
    """
    TokenBalanceMetadata — display metadata of one ERC-20 contract.
    """

    name: str
    symbol: str
    decimals: int | None


class TokenBalanceSourceError(Exception):
    """
    TokenBalanceSourceError — balance indexer request failed or returned an error payload.
    """


class TokenBalanceSource(Protocol):
    """
    TokenBalanceSource — on-chain ERC-20 balance indexer port.

    Related:
      - src/tradebot/contexts/custody/adapters/outbound/clients/alchemy/
        alchemy_token_balance_source.py
      - src/tradebot/contexts/custody/application/use_cases/list_token_balances.py
    """

    def list_balances(self, *, owner: EvmAddress) -> tuple[RawTokenBalance, ...]:
        """
        Return ERC-20 balances held by owner.

        Args:
            owner: Wallet address.
        Returns:
            tuple[RawTokenBalance, ...]: Balances in indexer order, zero balances included.
        Assumptions:
            Native ETH balance is not part of the result.
        Raises:
            TokenBalanceSourceError: If indexer call fails.
        Side Effects:
            One outbound HTTP call.
        """
        ...

    def fetch_metadata(self, *, contract_address: EvmAddress) -> TokenBalanceMetadata:
        """
        Return display metadata of one contract.

        Args:
            contract_address: ERC-20 contract.
        Returns:
            TokenBalanceMetadata: Name, symbol, and optional decimals.
        Assumptions:
            None.
        Raises:
            TokenBalanceSourceError: If indexer call fails.
        Side Effects:
            One outbound HTTP call.
        """
        ...
