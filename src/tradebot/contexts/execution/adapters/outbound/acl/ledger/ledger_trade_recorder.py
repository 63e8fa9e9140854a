from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from tradebot.contexts.execution.application.ports import TradeRecorder
from tradebot.contexts.execution.domain.value_objects import TradeSide
from tradebot.contexts.ledger.application.use_cases import RecordTradeUseCase
from tradebot.contexts.ledger.domain.value_objects import OrderType
from tradebot.shared_kernel.primitives import UserId

_ORDER_TYPE_BY_SIDE = {
    TradeSide.BUY: OrderType.BUY,
    TradeSide.SELL: OrderType.SELL,
}


@dataclass(frozen=True, slots=True)
class LedgerTradeRecorder(TradeRecorder):
    """
    Trade recorder ACL adapter over ledger `RecordTradeUseCase`.

    Related:
      - src/tradebot/contexts/execution/application/ports/trade_recorder.py
      - src/tradebot/contexts/ledger/application/use_cases/record_trade.py
      - apps/api/wiring/modules/tradebot.py
    """

    record_trade: RecordTradeUseCase

    def __post_init__(self) -> None:
        if self.record_trade is None:  # type: ignore[truthy-bool]
            raise ValueError("LedgerTradeRecorder requires record_trade")

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
        self.record_trade.record(
            record_id=record_id,
            user_id=user_id,
            symbol=symbol,
            amount=amount,
            price_usd=price_usd,
            order_type=_ORDER_TYPE_BY_SIDE[side],
        )
