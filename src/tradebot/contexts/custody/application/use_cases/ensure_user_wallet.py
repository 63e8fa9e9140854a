from __future__ import annotations

import logging

from tradebot.contexts.custody.application.ports import (
    AccountFactory,
    PrivateKeyVault,
    WalletRepository,
)
from tradebot.contexts.custody.application.use_cases.custody_models import EnsuredWallet
from tradebot.contexts.custody.domain.entities import UserWallet
from tradebot.platform.time import Clock
from tradebot.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)


class EnsureUserWalletUseCase:
    """
    EnsureUserWalletUseCase — register user on first contact and provision a random wallet.

    Related:
      - src/tradebot/contexts/custody/application/ports/wallet_repository.py
      - src/tradebot/contexts/custody/application/ports/private_key_vault.py
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
        """
        Initialize use-case dependencies.

        Args:
            repository: Users and wallets storage port.
            vault: Private key encryption port.
            account_factory: Random account generator.
            clock: UTC clock.
        Returns:
            None.
        Assumptions:
            Vault holds the process encryption key loaded at startup.
        Raises:
            ValueError: If one of dependencies is missing.
        Side Effects:
            None.
        """
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("EnsureUserWalletUseCase requires repository")
        if vault is None:  # type: ignore[truthy-bool]
            raise ValueError("EnsureUserWalletUseCase requires vault")
        if account_factory is None:  # type: ignore[truthy-bool]
            raise ValueError("EnsureUserWalletUseCase requires account_factory")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("EnsureUserWalletUseCase requires clock")
        self._repository = repository
        self._vault = vault
        self._account_factory = account_factory
        self._clock = clock

    def ensure(self, *, user_id: UserId, username: str | None) -> EnsuredWallet:
        """
        Return existing wallet address or create a new random wallet.

        Args:
            user_id: Front-end user identifier.
            username: Optional display handle stored with the user row.
        Returns:
            EnsuredWallet: Wallet address and whether it was created by this call.
        Assumptions:
            Concurrent first contacts are resolved by the repository primary key.
        Raises:
            ValueError: If repository cannot persist or map rows.
        Side Effects:
            Writes user row and, on first contact, one wallet row.
        """
        now = self._clock.now()
        self._repository.register_user(user_id=user_id, username=username, registered_at=now)

        existing = self._repository.find_by_user_id(user_id=user_id)
        if existing is not None:
            return EnsuredWallet(address=existing.address, created=False)

        account = self._account_factory.generate()
        wallet = UserWallet(
            user_id=user_id,
            address=account.address,
            envelope=self._vault.encrypt(private_key_hex=account.private_key_hex),
            created_at=now,
            updated_at=now,
        )
        created = self._repository.create(wallet=wallet)
        if created is None:
            winner = self._repository.find_by_user_id(user_id=user_id)
            if winner is None:
                raise ValueError("EnsureUserWalletUseCase lost wallet race but found no wallet")
            return EnsuredWallet(address=winner.address, created=False)

        log.info("custody wallet created user_id=%s address=%s", user_id, created.address)
        return EnsuredWallet(address=created.address, created=True)
