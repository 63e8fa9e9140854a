from __future__ import annotations

from decimal import Decimal
from typing import Protocol
from uuid import UUID

from tradebot.contexts.execution.domain.value_objects import TradeSide
from tradebot.shared_kernel.primitives import UserId


class TradeRecorder(Protocol):
    """
    TradeRecorder — ACL port appending confirmed trades to the ledger.

    Related:
      - src/tradebot/contexts/execution/adapters/outbound/acl/ledger/ledger_trade_recorder.py
      - src/tradebot/contexts/ledger/application/use_cases/record_trade.py
    """

    def record(
        self,
        *,
        record_id: UUID,
        user_id: UserId,
        side: TradeSide,
        symbol: str,
        amount: Decimal,
        price_usd: Decimal | None,
    ) -> None:
        """
        Append one ledger row for a confirmed trade.

        Args:
            record_id: Idempotency key of the ledger row.
            user_id: Trading user.
            side: Trade side.
            symbol: Token symbol.
            amount: Human-unit token amount.
            price_usd: Best-effort unit price.
        Returns:
            None.
        Assumptions:
            Repeated calls with the same `record_id` leave exactly one row.
        Raises:
            Exception: Ledger storage or validation errors.
        Side Effects:
            Writes at most one ledger row per `record_id`.
        """
        ...
