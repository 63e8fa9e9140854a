from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class Holding:
    """
    Holding — derived net position for one symbol (never stored).

    Related:
      - src/tradebot/contexts/ledger/domain/services/holdings_derivation.py
      - src/tradebot/contexts/ledger/application/use_cases/list_holdings.py
    """

    symbol: str
    amount: Decimal

    def __post_init__(self) -> None:
        """
        Validate that only positive net positions are materialized.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Zero and negative nets are filtered out before construction.
        Raises:
            ValueError: If symbol is blank or amount is not positive.
        Side Effects:
            None.
        """
        if not self.symbol.strip():
            raise ValueError("Holding.symbol must be non-empty")
        if self.amount <= 0:
            raise ValueError("Holding.amount must be > 0")
