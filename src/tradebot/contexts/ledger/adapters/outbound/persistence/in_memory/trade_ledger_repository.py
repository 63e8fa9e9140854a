from __future__ import annotations

import threading

from tradebot.contexts.ledger.application.ports import TradeLedgerRepository
from tradebot.contexts.ledger.domain.entities import Holding, TradeRecord
from tradebot.contexts.ledger.domain.services import derive_holdings
from tradebot.shared_kernel.primitives import UserId


class InMemoryTradeLedgerRepository(TradeLedgerRepository):
    """
    InMemoryTradeLedgerRepository — process-local append-only ledger for dev runs and tests.

    Related:
      - src/tradebot/contexts/ledger/application/ports/trade_ledger_repository.py
      - src/tradebot/contexts/ledger/adapters/outbound/persistence/postgres/
        trade_ledger_repository.py
      - tests/unit/contexts/ledger/application/test_ledger_use_cases.py
    """

    def __init__(self) -> None:
        """
        Initialize empty append-only rows list.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Instance may be shared by API worker threads.
        Raises:
            None.
        Side Effects:
            None.
        """
        self._rows: list[TradeRecord] = []
        self._lock = threading.Lock()

    def append(self, *, record: TradeRecord) -> bool:
        with self._lock:
            if any(row.record_id == record.record_id for row in self._rows):
                return False
            self._rows.append(record)
            return True

    def list_holdings(self, *, user_id: UserId) -> tuple[Holding, ...]:
        with self._lock:
            rows = [row for row in self._rows if row.user_id == user_id]
        return derive_holdings(rows)

    def list_recent(self, *, user_id: UserId, limit: int | None) -> tuple[TradeRecord, ...]:
        with self._lock:
            rows = [row for row in self._rows if row.user_id == user_id]
        rows.sort(key=lambda item: (item.recorded_at, str(item.record_id)), reverse=True)
        if limit is not None:
            rows = rows[:limit]
        return tuple(rows)
