from __future__ import annotations

from tradebot.contexts.ledger.application.ports import TradeLedgerRepository
from tradebot.contexts.ledger.domain.entities import Holding
from tradebot.shared_kernel.primitives import UserId


class ListHoldingsUseCase:
    """
    ListHoldingsUseCase — return current positive holdings derived from the ledger.

    Related:
      - src/tradebot/contexts/ledger/domain/services/holdings_derivation.py
      - apps/api/routes/ledger.py
    """

    def __init__(self, *, repository: TradeLedgerRepository) -> None:
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("ListHoldingsUseCase requires repository")
        self._repository = repository

    def list_current(self, *, user_id: UserId) -> tuple[Holding, ...]:
        """
        Return symbols with positive net amount sorted by symbol.

        Args:
            user_id: Ledger owner.
        Returns:
            tuple[Holding, ...]: Current holdings.
        Assumptions:
            Holdings are never stored; the repository derives them from ledger rows.
        Raises:
            Exception: Storage errors from repository.
        Side Effects:
            Reads ledger rows.
        """
        rows = self._repository.list_holdings(user_id=user_id)
        return tuple(sorted(rows, key=lambda item: item.symbol))
