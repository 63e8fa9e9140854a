from __future__ import annotations

from typing import Protocol

from tradebot.contexts.execution.domain.entities import TradeAttempt
from tradebot.contexts.execution.domain.value_objects import TradeAttemptStatus


class TradeAttemptRepository(Protocol):
    """
    TradeAttemptRepository — durable staging storage for in-flight trades.

    Related:
      - src/tradebot/contexts/execution/adapters/outbound/persistence/postgres/
        trade_attempt_repository.py
      - src/tradebot/contexts/execution/adapters/outbound/persistence/in_memory/
        trade_attempt_repository.py
      - src/tradebot/contexts/execution/application/use_cases/reconcile_trade_attempts.py
    """

    def create(self, *, attempt: TradeAttempt) -> None:
        """
        Insert new `pending` attempt.

        Args:
            attempt: New attempt snapshot.
        Returns:
            None.
        Assumptions:
            `attempt_id` is unique.
        Raises:
            Exception: Storage errors from implementation.
        Side Effects:
            Writes one row.
        """
        ...

    def save(self, *, attempt: TradeAttempt, expected_status: TradeAttemptStatus) -> bool:
        """
        Persist status change guarded by the previously observed status.

        Args:
            attempt: Updated snapshot.
            expected_status: Status the stored row must still have.
        Returns:
            bool: `False` when another writer already moved the row.
        Assumptions:
            Compare-and-set semantics make settlement happen exactly once.
        Raises:
            Exception: Storage errors from implementation.
        Side Effects:
            Updates at most one row.
        """
        ...

    def list_by_status(
        self,
        *,
        statuses: tuple[TradeAttemptStatus, ...],
        limit: int,
    ) -> tuple[TradeAttempt, ...]:
        """
        Return oldest attempts in any of `statuses`.

        Args:
            statuses: Statuses to include.
            limit: Maximum rows.
        Returns:
            tuple[TradeAttempt, ...]: Rows ordered by `created_at ASC, attempt_id ASC`.
        Assumptions:
            None.
        Raises:
            Exception: Storage errors from implementation.
        Side Effects:
            None.
        """
        ...
