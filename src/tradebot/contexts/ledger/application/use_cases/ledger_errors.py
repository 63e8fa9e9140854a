from __future__ import annotations

from tradebot.platform.errors import ErrorKind, TradeBotError, UserMessageCategory


class LedgerValidationError(TradeBotError):
    """
    LedgerValidationError — rejected ledger input (blank symbol, non-positive amount, bad limit).

    Related:
      - src/tradebot/contexts/ledger/application/use_cases/record_trade.py
      - src/tradebot/contexts/ledger/application/use_cases/list_trade_history.py
    """

    def __init__(self, *, message: str) -> None:
        """
        Build validation error with deterministic code and 422 status.

        Args:
            message: Caller-correctable description.
        Returns:
            None.
        Assumptions:
            Message contains no secrets.
        Raises:
            ValueError: If message is blank.
        Side Effects:
            None.
        """
        super().__init__(
            code="ledger_validation_error",
            message=message,
            kind=ErrorKind.USER,
            category=UserMessageCategory.VALIDATION,
            status_code=422,
        )
