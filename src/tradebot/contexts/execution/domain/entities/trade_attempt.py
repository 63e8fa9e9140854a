from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from tradebot.contexts.execution.domain.value_objects import (
    TradeAttemptStatus,
    TradeSide,
    can_transition,
)
from tradebot.shared_kernel.primitives import EvmAddress, UserId, ensure_utc_datetime


@dataclass(frozen=True, slots=True)
class TradeAttempt:
    """
    TradeAttempt — durable staging record of one trade, written before broadcast.

    Carries everything needed to write the ledger row later, so a process crash between
    confirmation and recording can be settled by reconciliation.

    Related:
      - src/tradebot/contexts/execution/application/ports/trade_attempt_repository.py
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
      - src/tradebot/contexts/execution/application/use_cases/reconcile_trade_attempts.py
    """

    attempt_id: UUID
    user_id: UserId
    side: TradeSide
    token_address: EvmAddress
    sell_amount_raw: int
    status: TradeAttemptStatus
    tx_hash: str | None
    symbol: str
    ledger_amount: Decimal | None
    price_usd: Decimal | None
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        """
        Validate amounts, tx hash presence per status, and UTC timestamps.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Every status after `pending` except `failed` requires a broadcast tx hash.
        Raises:
            ValueError: If one of invariants is violated.
        Side Effects:
            None.
        """
        if self.sell_amount_raw <= 0:
            raise ValueError("TradeAttempt.sell_amount_raw must be > 0")
        if not self.symbol.strip():
            raise ValueError("TradeAttempt.symbol must be non-empty")
        if self.ledger_amount is not None and self.ledger_amount <= 0:
            raise ValueError("TradeAttempt.ledger_amount must be > 0 when set")
        requires_hash = self.status in (
            TradeAttemptStatus.SUBMITTED,
            TradeAttemptStatus.UNKNOWN,
            TradeAttemptStatus.CONFIRMED,
            TradeAttemptStatus.RECORDED,
        )
        if requires_hash and not self.tx_hash:
            raise ValueError(f"TradeAttempt.tx_hash is required in status {self.status.value}")
        if self.status is TradeAttemptStatus.RECORDED and self.ledger_amount is None:
            raise ValueError("TradeAttempt.ledger_amount is required in status recorded")
        ensure_utc_datetime(name="created_at", value=self.created_at)
        ensure_utc_datetime(name="updated_at", value=self.updated_at)
        if self.updated_at < self.created_at:
            raise ValueError("TradeAttempt.updated_at cannot be before created_at")

    def transition(
        self,
        *,
        status: TradeAttemptStatus,
        changed_at: datetime,
        tx_hash: str | None = None,
        ledger_amount: Decimal | None = None,
    ) -> TradeAttempt:
        """
        Return new snapshot moved to `status`.

        Args:
            status: Target status.
            changed_at: UTC change timestamp.
            tx_hash: Broadcast hash; kept from current snapshot when omitted.
            ledger_amount: Ledger amount; kept from current snapshot when omitted.
        Returns:
            TradeAttempt: Updated snapshot.
        Assumptions:
            Caller persists the returned snapshot.
        Raises:
            ValueError: If transition is not allowed or resulting snapshot is invalid.
        Side Effects:
            None.
        """
        if not can_transition(source=self.status, target=status):
            raise ValueError(
                f"TradeAttempt cannot move from {self.status.value} to {status.value}"
            )
        return replace(
            self,
            status=status,
            tx_hash=tx_hash if tx_hash is not None else self.tx_hash,
            ledger_amount=ledger_amount if ledger_amount is not None else self.ledger_amount,
            updated_at=max(changed_at, self.updated_at),
        )
