from __future__ import annotations

from datetime import datetime
from typing import Protocol

from tradebot.contexts.custody.domain.entities import UserWallet
from tradebot.shared_kernel.primitives import UserId


class WalletRepository(Protocol):
    """
    WalletRepository — storage port for registered users and their custodial wallets.

    Related:
      - src/tradebot/contexts/custody/application/use_cases/ensure_user_wallet.py
      - src/tradebot/contexts/custody/adapters/outbound/persistence/postgres/wallet_repository.py
      - src/tradebot/contexts/custody/adapters/outbound/persistence/in_memory/wallet_repository.py
    """

    def register_user(
        self,
        *,
        user_id: UserId,
        username: str | None,
        registered_at: datetime,
    ) -> None:
        """
        Record user on first contact; later calls only refresh the username.

        Args:
            user_id: Front-end user identifier.
            username: Optional display handle.
            registered_at: UTC timestamp of first contact.
        Returns:
            None.
        Assumptions:
            Operation is idempotent.
        Raises:
            Exception: Storage errors from implementation.
        Side Effects:
            Writes at most one user row.
        """
        ...

    def find_by_user_id(self, *, user_id: UserId) -> UserWallet | None:
        """
        Return user's wallet or `None` when user has no wallet yet.

        Args:
            user_id: Wallet owner.
        Returns:
            UserWallet | None: Stored wallet snapshot.
        Assumptions:
            At most one wallet exists per user.
        Raises:
            ValueError: If stored row cannot be mapped.
        Side Effects:
            None.
        """
        ...

    def create(self, *, wallet: UserWallet) -> UserWallet | None:
        """
        Insert wallet unless the user already has one.

        Args:
            wallet: New wallet snapshot.
        Returns:
            UserWallet | None: Inserted wallet or `None` when one already exists.
        Assumptions:
            Concurrent creators race on the primary key; exactly one wins.
        Raises:
            Exception: Storage errors from implementation.
        Side Effects:
            Writes at most one wallet row.
        """
        ...

    def upsert(self, *, wallet: UserWallet) -> UserWallet:
        """
        Insert wallet or overwrite address and envelope of the existing one.

        Args:
            wallet: Wallet snapshot to store.
        Returns:
            UserWallet: Stored snapshot (original `created_at` kept on overwrite).
        Assumptions:
            Used by private key import only.
        Raises:
            Exception: Storage errors from implementation.
        Side Effects:
            Writes one wallet row.
        """
        ...
