from __future__ import annotations

from typing import Protocol

from tradebot.contexts.execution.application.ports.evm_chain_gateway import TradeSigner
from tradebot.shared_kernel.primitives import UserId


class TradeSignerResolver(Protocol):
    """
    TradeSignerResolver — ACL port loading the user's signing material from custody.

    Related:
      - src/tradebot/contexts/execution/adapters/outbound/acl/custody/custody_signer_resolver.py
      - src/tradebot/contexts/custody/application/use_cases/resolve_signer.py
    """

    def resolve(self, *, user_id: UserId) -> TradeSigner:
        """
        Return signer for user.

        Args:
            user_id: Trading user.
        Returns:
            TradeSigner: Decrypted signing material.
        Assumptions:
            Signer is dropped after the trade.
        Raises:
            WalletNotFoundError: If user has no wallet.
            KeyDecryptionError: If stored envelope cannot be opened.
            WalletIntegrityError: If key and stored address disagree.
        Side Effects:
            Reads custody storage.
        """
        ...
