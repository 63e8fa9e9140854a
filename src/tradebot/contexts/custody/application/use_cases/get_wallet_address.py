from __future__ import annotations

from tradebot.contexts.custody.application.ports import WalletRepository
from tradebot.shared_kernel.primitives import EvmAddress, UserId


class GetWalletAddressUseCase:
    """
    GetWalletAddressUseCase — read-only lookup of user's wallet address.

    Related:
      - src/tradebot/contexts/custody/application/ports/wallet_repository.py
      - apps/api/routes/wallets.py
    """

    def __init__(self, *, repository: WalletRepository) -> None:
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("GetWalletAddressUseCase requires repository")
        self._repository = repository

    def find_address(self, *, user_id: UserId) -> EvmAddress | None:
        wallet = self._repository.find_by_user_id(user_id=user_id)
        if wallet is None:
            return None
        return wallet.address
