from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from tradebot.shared_kernel.primitives import EvmAddress


@dataclass(frozen=True, slots=True)
class GeneratedAccount:
    """
    GeneratedAccount — freshly generated key pair; private key kept out of `repr`.
    """

    address: EvmAddress
    private_key_hex: str = field(repr=False)


class AccountFactory(Protocol):
    """
    AccountFactory — secp256k1 account generation and address derivation port.

    Related:
      - src/tradebot/contexts/custody/adapters/outbound/security/eth_account_factory.py
      - src/tradebot/contexts/custody/application/use_cases/import_user_wallet.py
    """

    def generate(self) -> GeneratedAccount:
        """
        Generate new random account.

        Args:
            None.
        Returns:
            GeneratedAccount: Address and `0x`-prefixed private key.
        Assumptions:
            Implementation uses a CSPRNG.
        Raises:
            None.
        Side Effects:
            Reads OS CSPRNG.
        """
        ...

    def address_of(self, *, private_key_hex: str) -> EvmAddress:
        """
        Derive account address from private key.

        Args:
            private_key_hex: `0x`-prefixed private key.
        Returns:
            EvmAddress: Derived address.
        Assumptions:
            Key has already been shape-validated.
        Raises:
            ValueError: If key is outside the secp256k1 scalar range.
        Side Effects:
            None.
        """
        ...
