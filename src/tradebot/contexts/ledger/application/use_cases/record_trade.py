from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable
from uuid import UUID, uuid4

from tradebot.contexts.ledger.application.ports import TradeLedgerRepository
from tradebot.contexts.ledger.application.use_cases.ledger_errors import LedgerValidationError
from tradebot.contexts.ledger.domain.entities import TradeRecord
from tradebot.contexts.ledger.domain.value_objects import OrderType
from tradebot.platform.time import Clock
from tradebot.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)


class RecordTradeUseCase:
    """
    RecordTradeUseCase — append exactly one ledger row for a confirmed trade.

    Related:
      - src/tradebot/contexts/ledger/application/ports/trade_ledger_repository.py
      - src/tradebot/contexts/execution/adapters/outbound/acl/ledger/ledger_trade_recorder.py
      - tests/unit/contexts/ledger/application/test_ledger_use_cases.py
    """

    def __init__(
        self,
        *,
        repository: TradeLedgerRepository,
        clock: Clock,
        record_id_factory: Callable[[], UUID] = uuid4,
    ) -> None:
        """
        Initialize use-case dependencies.

        Args:
            repository: Ledger storage port.
            clock: UTC clock for `recorded_at`.
            record_id_factory: Record identifier generator.
        Returns:
            None.
        Assumptions:
            Clock returns timezone-aware UTC datetimes.
        Raises:
            ValueError: If a dependency is missing.
        Side Effects:
            None.
        """
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("RecordTradeUseCase requires repository")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("RecordTradeUseCase requires clock")
        self._repository = repository
        self._clock = clock
        self._record_id_factory = record_id_factory

    def record(
        self,
        *,
        user_id: UserId,
        symbol: str,
        amount: Decimal,
        price_usd: Decimal | None,
        order_type: OrderType,
        record_id: UUID | None = None,
    ) -> TradeRecord:
        """
        Validate and append one trade record.

        Args:
            user_id: Ledger owner.
            symbol: Token symbol (placeholder symbols are accepted).
            amount: Unsigned human-unit amount.
            price_usd: Best-effort unit price or `None`.
            order_type: Trade side.
            record_id: Optional idempotency key; generated when omitted.
        Returns:
            TradeRecord: Row built for this call.
        Assumptions:
            Caller invokes this only after on-chain confirmation. A repeated `record_id` is
            not appended again.
        Raises:
            LedgerValidationError: If record fields violate ledger invariants.
        Side Effects:
            Writes at most one ledger row.
        """
        try:
            record = TradeRecord(
                record_id=record_id if record_id is not None else self._record_id_factory(),
                user_id=user_id,
                symbol=symbol,
                amount=amount,
                order_type=order_type,
                price_usd=price_usd,
                recorded_at=self._clock.now(),
            )
        except ValueError as error:
            raise LedgerValidationError(message=str(error)) from error

        if not self._repository.append(record=record):
            log.info(
                "ledger record already present record_id=%s user_id=%s",
                record.record_id,
                record.user_id,
            )
            return record
        log.info(
            "ledger record appended user_id=%s order_type=%s symbol=%s amount=%s",
            record.user_id,
            record.order_type.value,
            record.symbol,
            record.amount,
        )
        return record
