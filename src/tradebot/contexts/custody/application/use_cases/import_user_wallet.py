from __future__ import annotations

import logging

from tradebot.contexts.custody.application.ports import (
    AccountFactory,
    PrivateKeyVault,
    WalletRepository,
)
from tradebot.contexts.custody.application.use_cases.custody_errors import InvalidPrivateKeyError
from tradebot.contexts.custody.domain.entities import UserWallet
from tradebot.contexts.custody.domain.value_objects import normalize_private_key_hex
from tradebot.platform.time import Clock
from tradebot.shared_kernel.primitives import EvmAddress, UserId

log = logging.getLogger(__name__)


class ImportUserWalletUseCase:
    """
    ImportUserWalletUseCase — replace user's custodial wallet with an imported private key.

    Related:
      - src/tradebot/contexts/custody/domain/value_objects/private_key_hex.py
      - src/tradebot/contexts/custody/application/ports/wallet_repository.py
      - apps/api/routes/wallets.py
    """

    def __init__(
        self,
        *,
        repository: WalletRepository,
        vault: PrivateKeyVault,
        account_factory: AccountFactory,
        clock: Clock,
    ) -> None:
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("ImportUserWalletUseCase requires repository")
        if vault is None:  # type: ignore[truthy-bool]
            raise ValueError("ImportUserWalletUseCase requires vault")
        if account_factory is None:  # type: ignore[truthy-bool]
            raise ValueError("ImportUserWalletUseCase requires account_factory")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("ImportUserWalletUseCase requires clock")
        self._repository = repository
        self._vault = vault
        self._account_factory = account_factory
        self._clock = clock

    def import_private_key(self, *, user_id: UserId, private_key_hex: str) -> EvmAddress:
        """
        Validate key, derive address, encrypt and upsert wallet.

        Args:
            user_id: Wallet owner.
            private_key_hex: 64 hex characters with optional `0x` prefix.
        Returns:
            EvmAddress: Address of the imported wallet.
        Assumptions:
            Previous wallet of the user is overwritten; funds on it stay on-chain.
        Raises:
            InvalidPrivateKeyError: If key literal is malformed or outside curve range.
        Side Effects:
            Writes user row and one wallet row.
        """
        try:
            normalized_key = normalize_private_key_hex(private_key_hex)
            address = self._account_factory.address_of(private_key_hex=normalized_key)
        except ValueError as error:
            raise InvalidPrivateKeyError() from error

        now = self._clock.now()
        self._repository.register_user(user_id=user_id, username=None, registered_at=now)
        stored = self._repository.upsert(
            wallet=UserWallet(
                user_id=user_id,
                address=address,
                envelope=self._vault.encrypt(private_key_hex=normalized_key),
                created_at=now,
                updated_at=now,
            )
        )
        log.info("custody wallet imported user_id=%s address=%s", user_id, stored.address)
        return stored.address
