from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from tradebot.contexts.ledger.adapters.outbound.persistence.in_memory import (
    InMemoryTradeLedgerRepository,
)
from tradebot.contexts.ledger.application.use_cases import (
    LedgerValidationError,
    ListHoldingsUseCase,
    ListTradeHistoryUseCase,
    RecordTradeUseCase,
)
from tradebot.contexts.ledger.domain.value_objects import OrderType
from tradebot.shared_kernel.primitives import UserId

_START = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class _SteppingClock:
    """
    UTC clock advancing one second on every call.
    """

    def __init__(self) -> None:
        self._ticks = 0

    def now(self) -> datetime:
        current = _START + timedelta(seconds=self._ticks)
        self._ticks += 1
        return current


class _FrozenClock:
    """
    UTC clock returning the same instant on every call.
    """

    def now(self) -> datetime:
        return _START


class _IdFactory:
    """
    Deterministic UUID factory producing increasing ids.
    """

    def __init__(self) -> None:
        self._next = 1

    def __call__(self) -> UUID:
        value = UUID(int=self._next)
        self._next += 1
        return value


def test_record_trade_and_list_holdings_follow_ledger_arithmetic() -> None:
    """
    Verify buys 10 and 5 with sell 3 yield holding 12, and a closed position is hidden.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Holdings are derived from ledger rows on every read.
    Raises:
        AssertionError: If holdings arithmetic is wrong.
    Side Effects:
        None.
    """
    repository = InMemoryTradeLedgerRepository()
    recorder = RecordTradeUseCase(repository=repository, clock=_SteppingClock())
    user_id = UserId("500")

    for amount, order_type in (("10", OrderType.BUY), ("5", OrderType.BUY), ("3", OrderType.SELL)):
        recorder.record(
            user_id=user_id,
            symbol="DEGEN",
            amount=Decimal(amount),
            price_usd=Decimal("0.01"),
            order_type=order_type,
        )
    recorder.record(
        user_id=user_id,
        symbol="AERO",
        amount=Decimal("5"),
        price_usd=None,
        order_type=OrderType.BUY,
    )
    recorder.record(
        user_id=user_id,
        symbol="AERO",
        amount=Decimal("5"),
        price_usd=None,
        order_type=OrderType.SELL,
    )

    holdings = ListHoldingsUseCase(repository=repository).list_current(user_id=user_id)

    assert [(holding.symbol, holding.amount) for holding in holdings] == [
        ("DEGEN", Decimal("12")),
    ]
    assert ListHoldingsUseCase(repository=repository).list_current(user_id=UserId("501")) == ()


def test_record_trade_with_repeated_record_id_appends_one_row() -> None:
    repository = InMemoryTradeLedgerRepository()
    recorder = RecordTradeUseCase(repository=repository, clock=_SteppingClock())
    user_id = UserId("502")

    for _ in range(2):
        recorder.record(
            user_id=user_id,
            symbol="DEGEN",
            amount=Decimal("10"),
            price_usd=None,
            order_type=OrderType.BUY,
            record_id=UUID(int=99),
        )

    rows = repository.list_recent(user_id=user_id, limit=None)
    holdings = ListHoldingsUseCase(repository=repository).list_current(user_id=user_id)
    assert [row.record_id for row in rows] == [UUID(int=99)]
    assert [(holding.symbol, holding.amount) for holding in holdings] == [
        ("DEGEN", Decimal("10")),
    ]


@pytest.mark.parametrize("amount", ["0", "-1", "NaN"])
def test_record_trade_rejects_non_positive_amount(amount: str) -> None:
    repository = InMemoryTradeLedgerRepository()
    recorder = RecordTradeUseCase(repository=repository, clock=_FrozenClock())

    with pytest.raises(LedgerValidationError):
        recorder.record(
            user_id=UserId("500"),
            symbol="DEGEN",
            amount=Decimal(amount),
            price_usd=None,
            order_type=OrderType.BUY,
        )
    assert repository.list_recent(user_id=UserId("500"), limit=None) == ()


def test_record_trade_rejects_blank_symbol() -> None:
    recorder = RecordTradeUseCase(repository=InMemoryTradeLedgerRepository(), clock=_FrozenClock())

    with pytest.raises(LedgerValidationError):
        recorder.record(
            user_id=UserId("500"),
            symbol="  ",
            amount=Decimal("1"),
            price_usd=None,
            order_type=OrderType.BUY,
        )


def test_list_trade_history_returns_newest_first_with_record_id_tiebreak() -> None:
    """
    Verify history ordering and default limit when rows share a timestamp.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Ties on `recorded_at` are ordered by `record_id` descending.
    Raises:
        AssertionError: If ordering or limit handling drifts.
    Side Effects:
        None.
    """
    repository = InMemoryTradeLedgerRepository()
    recorder = RecordTradeUseCase(
        repository=repository,
        clock=_FrozenClock(),
        record_id_factory=_IdFactory(),
    )
    for _ in range(3):
        recorder.record(
            user_id=UserId("500"),
            symbol="DEGEN",
            amount=Decimal("1"),
            price_usd=None,
            order_type=OrderType.BUY,
        )
    history = ListTradeHistoryUseCase(repository=repository, default_limit=2)

    recent = history.list_recent(user_id=UserId("500"))
    everything = history.list_recent(user_id=UserId("500"), limit=10)

    assert [record.record_id for record in recent] == [UUID(int=3), UUID(int=2)]
    assert len(everything) == 3


@pytest.mark.parametrize("limit", [0, -5, 501])
def test_list_trade_history_rejects_out_of_range_limit(limit: int) -> None:
    history = ListTradeHistoryUseCase(repository=InMemoryTradeLedgerRepository())

    with pytest.raises(LedgerValidationError):
        history.list_recent(user_id=UserId("500"), limit=limit)


def test_list_trade_history_rejects_invalid_default_limit() -> None:
    with pytest.raises(ValueError):
        ListTradeHistoryUseCase(repository=InMemoryTradeLedgerRepository(), default_limit=0)
