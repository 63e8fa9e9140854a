from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from tradebot.contexts.ledger.domain.value_objects import OrderType
from tradebot.shared_kernel.primitives import UserId, ensure_utc_datetime

_MAX_SYMBOL_LENGTH = 64


@dataclass(frozen=True, slots=True)
class TradeRecord:
    """
    TradeRecord — immutable append-only ledger row for one confirmed trade.

    Related:
      - src/tradebot/contexts/ledger/application/ports/trade_ledger_repository.py
      - src/tradebot/contexts/ledger/domain/services/holdings_derivation.py
      - alembic/versions/20261019_0001_tradebot_storage_v1.py
    """

    record_id: UUID
    user_id: UserId
    symbol: str
    amount: Decimal
    order_type: OrderType
    price_usd: Decimal | None
    recorded_at: datetime

    def __post_init__(self) -> None:
        """
        Validate symbol, unsigned amount, optional price, and UTC timestamp invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Amount is a human-unit magnitude; direction is carried by `order_type`.
        Raises:
            ValueError: If any field violates ledger invariants.
        Side Effects:
            Normalizes `symbol` by stripping surrounding whitespace.
        """
        normalized_symbol = self.symbol.strip()
        if not normalized_symbol:
            raise ValueError("TradeRecord.symbol must be non-empty")
        if len(normalized_symbol) > _MAX_SYMBOL_LENGTH:
            raise ValueError(f"TradeRecord.symbol length must be <= {_MAX_SYMBOL_LENGTH}")
        object.__setattr__(self, "symbol", normalized_symbol)

        if not self.amount.is_finite() or self.amount <= 0:
            raise ValueError("TradeRecord.amount must be a finite positive decimal")
        if self.price_usd is not None:
            if not self.price_usd.is_finite() or self.price_usd < 0:
                raise ValueError("TradeRecord.price_usd must be a finite non-negative decimal")
        ensure_utc_datetime(name="recorded_at", value=self.recorded_at)

    @property
    def signed_amount(self) -> Decimal:
        """
        Return amount signed by order type for holdings aggregation.

        Args:
            None.
        Returns:
            Decimal: Positive for buys, negative for sells.
        Assumptions:
            None.
        Raises:
            None.
        Side Effects:
            None.
        """
        return self.order_type.signed(self.amount)
