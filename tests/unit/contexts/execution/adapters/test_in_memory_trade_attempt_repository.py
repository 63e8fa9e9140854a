from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from tradebot.contexts.execution.adapters.outbound.persistence.in_memory import (
    InMemoryTradeAttemptRepository,
)
from tradebot.contexts.execution.domain.entities import TradeAttempt
from tradebot.contexts.execution.domain.value_objects import TradeAttemptStatus, TradeSide
from tradebot.shared_kernel.primitives import EvmAddress, UserId

_CREATED_AT = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


def _pending(*, number: int, offset_s: int = 0) -> TradeAttempt:
    created_at = _CREATED_AT + timedelta(seconds=offset_s)
    return TradeAttempt(
        attempt_id=UUID(int=number),
        user_id=UserId("5"),
        side=TradeSide.SELL,
        token_address=EvmAddress("0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"),
        sell_amount_raw=1_000_000,
        status=TradeAttemptStatus.PENDING,
        tx_hash=None,
        symbol="USDC",
        ledger_amount=Decimal("1"),
        price_usd=Decimal("1"),
        created_at=created_at,
        updated_at=created_at,
    )


def test_in_memory_repository_save_is_compare_and_set_on_status() -> None:
    """
    Verify save succeeds only when stored status equals the expected one.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Executor and reconciler never overwrite each other's transitions.
    Raises:
        AssertionError: If stale save is accepted.
    Side Effects:
        None.
    """
    repository = InMemoryTradeAttemptRepository()
    attempt = _pending(number=1)
    repository.create(attempt=attempt)
    submitted = attempt.transition(
        status=TradeAttemptStatus.SUBMITTED,
        changed_at=_CREATED_AT + timedelta(seconds=1),
        tx_hash="0x" + "01" * 32,
    )

    assert repository.save(attempt=submitted, expected_status=TradeAttemptStatus.PENDING)
    assert not repository.save(attempt=submitted, expected_status=TradeAttemptStatus.PENDING)
    stored = repository.get(attempt_id=attempt.attempt_id)
    assert stored is not None
    assert stored.status is TradeAttemptStatus.SUBMITTED


def test_in_memory_repository_rejects_duplicate_create() -> None:
    repository = InMemoryTradeAttemptRepository()
    repository.create(attempt=_pending(number=1))

    with pytest.raises(ValueError, match="already exists"):
        repository.create(attempt=_pending(number=1))


def test_in_memory_repository_lists_by_status_oldest_first_with_limit() -> None:
    repository = InMemoryTradeAttemptRepository()
    repository.create(attempt=_pending(number=3, offset_s=30))
    repository.create(attempt=_pending(number=1, offset_s=10))
    repository.create(attempt=_pending(number=2, offset_s=20))

    rows = repository.list_by_status(statuses=(TradeAttemptStatus.PENDING,), limit=2)

    assert [row.attempt_id for row in rows] == [UUID(int=1), UUID(int=2)]
    assert repository.list_by_status(statuses=(TradeAttemptStatus.FAILED,), limit=10) == ()
