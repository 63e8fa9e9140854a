from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime

from tradebot.contexts.custody.application.ports import WalletRepository
from tradebot.contexts.custody.domain.entities import UserWallet
from tradebot.shared_kernel.primitives import UserId


class InMemoryWalletRepository(WalletRepository):
    """
    InMemoryWalletRepository — process-local users and wallets storage for dev runs and tests.

    Related:
      - src/tradebot/contexts/custody/application/ports/wallet_repository.py
      - src/tradebot/contexts/custody/adapters/outbound/persistence/postgres/wallet_repository.py
      - tests/unit/contexts/custody/application/test_custody_use_cases.py
    """

    def __init__(self) -> None:
        self._usernames: dict[str, str | None] = {}
        self._wallets: dict[str, UserWallet] = {}
        self._lock = threading.Lock()

    def register_user(
        self,
        *,
        user_id: UserId,
        username: str | None,
        registered_at: datetime,
    ) -> None:
        with self._lock:
            key = str(user_id)
            if key not in self._usernames or username is not None:
                self._usernames[key] = username

    def username_of(self, *, user_id: UserId) -> str | None:
        """
        Return stored username (test helper, not part of the port).

        Args:
            user_id: Registered user.
        Returns:
            str | None: Stored username.
        Assumptions:
            None.
        Raises:
            KeyError: If user is not registered.
        Side Effects:
            None.
        """
        with self._lock:
            return self._usernames[str(user_id)]

    def find_by_user_id(self, *, user_id: UserId) -> UserWallet | None:
        with self._lock:
            return self._wallets.get(str(user_id))

    def create(self, *, wallet: UserWallet) -> UserWallet | None:
        with self._lock:
            key = str(wallet.user_id)
            if key in self._wallets:
                return None
            self._wallets[key] = wallet
            return wallet

    def upsert(self, *, wallet: UserWallet) -> UserWallet:
        with self._lock:
            key = str(wallet.user_id)
            existing = self._wallets.get(key)
            stored = (
                wallet
                if existing is None
                else replace(wallet, created_at=existing.created_at)
            )
            self._wallets[key] = stored
            return stored
