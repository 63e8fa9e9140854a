from __future__ import annotations

from eth_account import Account

from tradebot.contexts.custody.application.ports import AccountFactory, GeneratedAccount
from tradebot.shared_kernel.primitives import EvmAddress


class EthAccountFactory(AccountFactory):
    """
    EthAccountFactory — `eth_account` backed key generation and address derivation.

    Related:
      - src/tradebot/contexts/custody/application/ports/account_factory.py
      - src/tradebot/contexts/custody/application/use_cases/ensure_user_wallet.py
    """

    def generate(self) -> GeneratedAccount:
        account = Account.create()
        return GeneratedAccount(
            address=EvmAddress(account.address),
            private_key_hex="0x" + bytes(account.key).hex(),
        )

    def address_of(self, *, private_key_hex: str) -> EvmAddress:
        """
        Derive checksum-insensitive address from private key.

        Args:
            private_key_hex: `0x`-prefixed private key.
        Returns:
            EvmAddress: Derived address.
        Assumptions:
            None.
        Raises:
            ValueError: If key is zero or exceeds the curve order.
        Side Effects:
            None.
        """
        try:
            account = Account.from_key(private_key_hex)
        except Exception as error:  # noqa: BLE001
            raise ValueError("private key is outside the secp256k1 range") from error
        return EvmAddress(account.address)
