from __future__ import annotations

import threading
from uuid import UUID

from tradebot.contexts.execution.application.ports import TradeAttemptRepository
from tradebot.contexts.execution.domain.entities import TradeAttempt
from tradebot.contexts.execution.domain.value_objects import TradeAttemptStatus


class InMemoryTradeAttemptRepository(TradeAttemptRepository):
    """
    InMemoryTradeAttemptRepository — process-local staging store for dev runs and tests.

    Related:
      - src/tradebot/contexts/execution/application/ports/trade_attempt_repository.py
      - src/tradebot/contexts/execution/adapters/outbound/persistence/postgres/
        trade_attempt_repository.py
    """

    def __init__(self) -> None:
        self._rows: dict[UUID, TradeAttempt] = {}
        self._lock = threading.Lock()

    def create(self, *, attempt: TradeAttempt) -> None:
        with self._lock:
            if attempt.attempt_id in self._rows:
                raise ValueError(f"trade attempt already exists: {attempt.attempt_id}")
            self._rows[attempt.attempt_id] = attempt

    def save(self, *, attempt: TradeAttempt, expected_status: TradeAttemptStatus) -> bool:
        with self._lock:
            current = self._rows.get(attempt.attempt_id)
            if current is None or current.status is not expected_status:
                return False
            self._rows[attempt.attempt_id] = attempt
            return True

    def list_by_status(
        self,
        *,
        statuses: tuple[TradeAttemptStatus, ...],
        limit: int,
    ) -> tuple[TradeAttempt, ...]:
        with self._lock:
            rows = [row for row in self._rows.values() if row.status in statuses]
        rows.sort(key=lambda item: (item.created_at, str(item.attempt_id)))
        return tuple(rows[:limit])

    def get(self, *, attempt_id: UUID) -> TradeAttempt | None:
        """
        Return stored snapshot by id (test and diagnostics helper).

        Args:
            attempt_id: Attempt identifier.
        Returns:
            TradeAttempt | None: Snapshot or `None`.
        Assumptions:
            Not part of the repository port.
        Raises:
            None.
        Side Effects:
            None.
        """
        with self._lock:
            return self._rows.get(attempt_id)

    def list_all(self) -> tuple[TradeAttempt, ...]:
        with self._lock:
            rows = list(self._rows.values())
        rows.sort(key=lambda item: (item.created_at, str(item.attempt_id)))
        return tuple(rows)
