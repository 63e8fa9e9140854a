from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from tradebot.platform.errors import ErrorKind, TradeBotError, UserMessageCategory
from tradebot.shared_kernel.primitives import UserId


class TradeInProgressError(TradeBotError):
    """
    TradeInProgressError — another trade of the same user has not finished yet.
    """

    def __init__(self) -> None:
        super().__init__(
            code="trade_in_progress",
            message="Another trade is still in progress. Please wait for it to finish.",
            kind=ErrorKind.USER,
            category=UserMessageCategory.TRADE,
            status_code=409,
        )


class PerUserTradeLock:
    """
    PerUserTradeLock — process-local guard allowing one in-flight trade per user.

    A second trade of the same user fails fast instead of queueing, so two trades never race
    on the same account nonce or on each other's allowance. Multi-process deployments rely on
    the nonce check of the node as the last line.

    Related:
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
      - tests/unit/contexts/execution/application/test_per_user_trade_lock.py
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._active: set[str] = set()

    @contextmanager
    def hold(self, *, user_id: UserId) -> Iterator[None]:
        """
        Hold user's trade slot for the duration of the `with` block.

        Args:
            user_id: Trading user.
        Returns:
            Iterator[None]: Context manager body.
        Assumptions:
            Slot is released even when the body raises.
        Raises:
            TradeInProgressError: If the user already holds the slot.
        Side Effects:
            Mutates process-local active users set.
        """
        key = str(user_id)
        with self._guard:
            if key in self._active:
                raise TradeInProgressError()
            self._active.add(key)
        try:
            yield
        finally:
            with self._guard:
                self._active.discard(key)

    def is_held(self, *, user_id: UserId) -> bool:
        with self._guard:
            return str(user_id) in self._active
