from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from tradebot.contexts.ledger.domain.entities import TradeRecord
from tradebot.contexts.ledger.domain.services import derive_holdings
from tradebot.contexts.ledger.domain.value_objects import OrderType
from tradebot.shared_kernel.primitives import UserId

_START = datetime(2026, 10, 19, tzinfo=timezone.utc)


def _record(*, symbol: str, amount: str, order_type: OrderType, minute: int) -> TradeRecord:
    return TradeRecord(
        record_id=uuid4(),
        user_id=UserId("7"),
        symbol=symbol,
        amount=Decimal(amount),
        order_type=order_type,
        price_usd=None,
        recorded_at=_START + timedelta(minutes=minute),
    )


def test_derive_holdings_nets_buys_and_sells_per_symbol() -> None:
    """
    Verify holdings are `sum(buy) - sum(sell)` per symbol and closed positions disappear.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Rows may arrive in any order.
    Raises:
        AssertionError: If aggregation or filtering is wrong.
    Side Effects:
        None.
    """
    records = [
        _record(symbol="DEGEN", amount="10", order_type=OrderType.BUY, minute=0),
        _record(symbol="AERO", amount="5", order_type=OrderType.BUY, minute=1),
        _record(symbol="DEGEN", amount="3", order_type=OrderType.SELL, minute=3),
        _record(symbol="AERO", amount="5", order_type=OrderType.SELL, minute=4),
        _record(symbol="DEGEN", amount="5", order_type=OrderType.BUY, minute=2),
    ]

    holdings = derive_holdings(records)

    assert [(holding.symbol, holding.amount) for holding in holdings] == [
        ("DEGEN", Decimal("12")),
    ]


def test_derive_holdings_drops_oversold_symbols_and_sorts_by_symbol() -> None:
    records = [
        _record(symbol="ZORA", amount="1.5", order_type=OrderType.BUY, minute=0),
        _record(symbol="BRETT", amount="1", order_type=OrderType.BUY, minute=1),
        _record(symbol="BRETT", amount="2", order_type=OrderType.SELL, minute=2),
        _record(symbol="AERO", amount="0.000001", order_type=OrderType.BUY, minute=3),
    ]

    holdings = derive_holdings(records)

    assert [holding.symbol for holding in holdings] == ["AERO", "ZORA"]
    assert derive_holdings([]) == ()
