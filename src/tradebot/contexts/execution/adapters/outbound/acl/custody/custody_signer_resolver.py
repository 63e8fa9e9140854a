from __future__ import annotations

from dataclasses import dataclass

from tradebot.contexts.custody.application.use_cases import ResolveSignerUseCase
from tradebot.contexts.execution.application.ports import TradeSigner, TradeSignerResolver
from tradebot.shared_kernel.primitives import UserId


@dataclass(frozen=True, slots=True)
class CustodyTradeSignerResolver(TradeSignerResolver):
    """
    Trade signer ACL adapter over custody `ResolveSignerUseCase`.

    Related:
      - src/tradebot/contexts/execution/application/ports/trade_signer_resolver.py
      - src/tradebot/contexts/custody/application/use_cases/resolve_signer.py
      - apps/api/wiring/modules/tradebot.py
    """

    resolve_signer: ResolveSignerUseCase

    def __post_init__(self) -> None:
        if self.resolve_signer is None:  # type: ignore[truthy-bool]
            raise ValueError("CustodyTradeSignerResolver requires resolve_signer")

    def resolve(self, *, user_id: UserId) -> TradeSigner:
        """
        Map custody signer into execution signer.

        Args:
            user_id: Trading user.
        Returns:
            TradeSigner: Address and decrypted key.
        Assumptions:
            Custody errors propagate unchanged; they are already classified.
        Raises:
            WalletNotFoundError: If user has no wallet.
            KeyDecryptionError: If envelope cannot be opened.
            WalletIntegrityError: If key and stored address disagree.
        Side Effects:
            Reads custody storage.
        """
        signer = self.resolve_signer.resolve(user_id=user_id)
        return TradeSigner(address=signer.address, private_key_hex=signer.private_key_hex)
