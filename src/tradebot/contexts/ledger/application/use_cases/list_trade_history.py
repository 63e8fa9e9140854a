from __future__ import annotations

from tradebot.contexts.ledger.application.ports import TradeLedgerRepository
from tradebot.contexts.ledger.application.use_cases.ledger_errors import LedgerValidationError
from tradebot.contexts.ledger.domain.entities import TradeRecord
from tradebot.shared_kernel.primitives import UserId

DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 500


class ListTradeHistoryUseCase:
    """
    ListTradeHistoryUseCase — return newest-first ledger rows with an optional bound.

    Related:
      - src/tradebot/contexts/ledger/application/ports/trade_ledger_repository.py
      - apps/api/routes/ledger.py
    """

    def __init__(
        self,
        *,
        repository: TradeLedgerRepository,
        default_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        """
        Initialize use-case with repository and default page size.

        Args:
            repository: Ledger storage port.
            default_limit: Limit applied when caller passes none.
        Returns:
            None.
        Assumptions:
            Default limit comes from runtime config.
        Raises:
            ValueError: If repository is missing or default limit is out of range.
        Side Effects:
            None.
        """
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("ListTradeHistoryUseCase requires repository")
        if default_limit <= 0 or default_limit > MAX_HISTORY_LIMIT:
            raise ValueError(
                f"ListTradeHistoryUseCase.default_limit must be in [1, {MAX_HISTORY_LIMIT}]"
            )
        self._repository = repository
        self._default_limit = default_limit

    def list_recent(self, *, user_id: UserId, limit: int | None = None) -> tuple[TradeRecord, ...]:
        """
        Return up to `limit` most recent ledger rows.

        Args:
            user_id: Ledger owner.
            limit: Optional row bound; configured default when omitted.
        Returns:
            tuple[TradeRecord, ...]: Rows ordered newest first.
        Assumptions:
            Ties on `recorded_at` are broken by `record_id` descending.
        Raises:
            LedgerValidationError: If limit is outside `[1, MAX_HISTORY_LIMIT]`.
        Side Effects:
            Reads ledger rows.
        """
        resolved_limit = self._default_limit if limit is None else limit
        if resolved_limit <= 0 or resolved_limit > MAX_HISTORY_LIMIT:
            raise LedgerValidationError(
                message=f"limit must be between 1 and {MAX_HISTORY_LIMIT}",
            )
        rows = self._repository.list_recent(user_id=user_id, limit=resolved_limit)
        return tuple(
            sorted(
                rows,
                key=lambda item: (item.recorded_at, str(item.record_id)),
                reverse=True,
            )
        )[:resolved_limit]
