from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tradebot.contexts.custody.domain.value_objects import EncryptedKeyEnvelope
from tradebot.shared_kernel.primitives import EvmAddress, UserId, ensure_utc_datetime


@dataclass(frozen=True, slots=True)
class UserWallet:
    """
    UserWallet — custodial wallet snapshot; at most one per user, never deleted.

    Related:
      - src/tradebot/contexts/custody/application/ports/wallet_repository.py
      - src/tradebot/contexts/custody/application/use_cases/resolve_signer.py
      - alembic/versions/20261019_0001_tradebot_storage_v1.py
    """

    user_id: UserId
    address: EvmAddress
    envelope: EncryptedKeyEnvelope
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        """
        Validate UTC timestamps and their ordering.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Import overwrites `address`/`envelope` and moves `updated_at` forward.
        Raises:
            ValueError: If timestamps are naive, non-UTC, or out of order.
        Side Effects:
            None.
        """
        ensure_utc_datetime(name="created_at", value=self.created_at)
        ensure_utc_datetime(name="updated_at", value=self.updated_at)
        if self.updated_at < self.created_at:
            raise ValueError("UserWallet.updated_at cannot be before created_at")
