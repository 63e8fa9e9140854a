from __future__ import annotations

from enum import Enum


class TradeAttemptStatus(str, Enum):
    """
    TradeAttemptStatus — lifecycle of one staged trade.

    `pending -> submitted -> confirmed -> recorded` on success; `failed` when the trade is known
    not to have executed; `unknown` when the receipt wait timed out after broadcast.

    Related:
      - src/tradebot/contexts/execution/domain/entities/trade_attempt.py
      - src/tradebot/contexts/execution/application/use_cases/reconcile_trade_attempts.py
    """

    PENDING = "pending"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    RECORDED = "recorded"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @property
    def is_terminal(self) -> bool:
        return self in (TradeAttemptStatus.RECORDED, TradeAttemptStatus.FAILED)


_ALLOWED_TRANSITIONS: dict[TradeAttemptStatus, frozenset[TradeAttemptStatus]] = {
    TradeAttemptStatus.PENDING: frozenset(
        {TradeAttemptStatus.SUBMITTED, TradeAttemptStatus.FAILED}
    ),
    TradeAttemptStatus.SUBMITTED: frozenset(
        {TradeAttemptStatus.CONFIRMED, TradeAttemptStatus.FAILED, TradeAttemptStatus.UNKNOWN}
    ),
    TradeAttemptStatus.UNKNOWN: frozenset(
        {TradeAttemptStatus.CONFIRMED, TradeAttemptStatus.FAILED}
    ),
    TradeAttemptStatus.CONFIRMED: frozenset({TradeAttemptStatus.RECORDED}),
    TradeAttemptStatus.RECORDED: frozenset(),
    TradeAttemptStatus.FAILED: frozenset(),
}


def can_transition(*, source: TradeAttemptStatus, target: TradeAttemptStatus) -> bool:
    """
    Return whether lifecycle allows moving from `source` to `target`.

    Args:
        source: Current status.
        target: Requested status.
    Returns:
        bool: `True` when transition is allowed.
    Assumptions:
        Terminal statuses accept no transitions.
    Raises:
        None.
    Side Effects:
        None.
    """
    return target in _ALLOWED_TRANSITIONS[source]
