from __future__ import annotations

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """
    Clock — port of current UTC time for custody, execution and ledger use-cases.

    Related:
      - src/tradebot/platform/time/system_clock.py
      - src/tradebot/contexts/ledger/application/use_cases/record_trade.py
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
    """

    def now(self) -> datetime:
        """
        Return current UTC timestamp.

        Args:
            None.
        Returns:
            datetime: Timezone-aware UTC datetime.
        Assumptions:
            Implementations return wall-clock progression for request flow.
        Raises:
            None.
        Side Effects:
            None.
        """
        ...
