from __future__ import annotations

import logging

from tradebot.contexts.custody.application.ports import (
    AccountFactory,
    PrivateKeyVault,
    WalletRepository,
)
from tradebot.contexts.custody.application.use_cases.custody_errors import (
    WalletIntegrityError,
    WalletNotFoundError,
)
from tradebot.contexts.custody.application.use_cases.custody_models import WalletSigner
from tradebot.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)


class ResolveSignerUseCase:
    """
    ResolveSignerUseCase — load and decrypt user's private key for one trade.

    Related:
      - src/tradebot/contexts/custody/application/ports/private_key_vault.py
      - src/tradebot/contexts/execution/adapters/outbound/acl/custody/custody_signer_resolver.py
      - tests/unit/contexts/custody/application/test_custody_use_cases.py
    """

    def __init__(
        self,
        *,
        repository: WalletRepository,
        vault: PrivateKeyVault,
        account_factory: AccountFactory,
    ) -> None:
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("ResolveSignerUseCase requires repository")
        if vault is None:  # type: ignore[truthy-bool]
            raise ValueError("ResolveSignerUseCase requires vault")
        if account_factory is None:  # type: ignore[truthy-bool]
            raise ValueError("ResolveSignerUseCase requires account_factory")
        self._repository = repository
        self._vault = vault
        self._account_factory = account_factory

    def resolve(self, *, user_id: UserId) -> WalletSigner:
        """
        Return signing material after verifying it matches the stored address.

        Args:
            user_id: Wallet owner.
        Returns:
            WalletSigner: Address and decrypted private key.
        Assumptions:
            Caller drops the signer once the trade finishes.
        Raises:
            WalletNotFoundError: If user has no wallet.
            KeyDecryptionError: If envelope authentication fails.
            WalletIntegrityError: If derived address differs from stored address.
        Side Effects:
            Reads one wallet row.
        """
        wallet = self._repository.find_by_user_id(user_id=user_id)
        if wallet is None:
            raise WalletNotFoundError()

        private_key_hex = self._vault.decrypt(envelope=wallet.envelope)
        derived_address = self._account_factory.address_of(private_key_hex=private_key_hex)
        if derived_address != wallet.address:
            log.error(
                "custody wallet address mismatch user_id=%s stored_address=%s",
                user_id,
                wallet.address,
            )
            raise WalletIntegrityError()
        return WalletSigner(
            user_id=user_id,
            address=wallet.address,
            private_key_hex=private_key_hex,
        )
