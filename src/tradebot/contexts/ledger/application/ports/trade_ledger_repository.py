from __future__ import annotations

from typing import Protocol

from tradebot.contexts.ledger.domain.entities import Holding, TradeRecord
from tradebot.shared_kernel.primitives import UserId


class TradeLedgerRepository(Protocol):
    """
    TradeLedgerRepository — append-only storage port for confirmed trade records.

    Related:
      - src/tradebot/contexts/ledger/application/use_cases/record_trade.py
      - src/tradebot/contexts/ledger/adapters/outbound/persistence/postgres/
        trade_ledger_repository.py
      - src/tradebot/contexts/ledger/adapters/outbound/persistence/in_memory/
        trade_ledger_repository.py
    """

    def append(self, *, record: TradeRecord) -> bool:
        """
        Persist one new ledger row unless its `record_id` is already stored.

        Args:
            record: Validated trade record.
        Returns:
            bool: `True` when a row was inserted, `False` when `record_id` already existed.
        Assumptions:
            Rows are never updated or deleted; `record_id` is the idempotency key.
        Raises:
            Exception: Storage errors from implementation.
        Side Effects:
            Writes at most one ledger row.
        """
        ...

    def list_holdings(self, *, user_id: UserId) -> tuple[Holding, ...]:
        """
        Return user's positive net positions grouped by symbol.

        Args:
            user_id: Ledger owner.
        Returns:
            tuple[Holding, ...]: Holdings with `net > 0` sorted by symbol.
        Assumptions:
            Net is `sum(buy amounts) - sum(sell amounts)`.
        Raises:
            Exception: Storage errors from implementation.
        Side Effects:
            None.
        """
        ...

    def list_recent(self, *, user_id: UserId, limit: int | None) -> tuple[TradeRecord, ...]:
        """
        Return user's ledger rows newest first.

        Args:
            user_id: Ledger owner.
            limit: Optional maximum number of rows; `None` returns all rows.
        Returns:
            tuple[TradeRecord, ...]: Rows ordered by `recorded_at DESC, record_id DESC`.
        Assumptions:
            Limit is validated by the use-case.
        Raises:
            Exception: Storage errors from implementation.
        Side Effects:
            None.
        """
        ...
