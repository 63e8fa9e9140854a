from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from tradebot.contexts.ledger.domain.entities import Holding, TradeRecord


def derive_holdings(records: Iterable[TradeRecord]) -> tuple[Holding, ...]:
    """
    Fold ledger rows into current holdings (`sum(buy) - sum(sell)` per symbol, net > 0 only).

    Args:
        records: Ledger rows of one user in any order.
    Returns:
        tuple[Holding, ...]: Positive net positions sorted by symbol.
    Assumptions:
        Symbols are compared exactly as recorded; two tokens sharing a symbol aggregate together.
    Raises:
        None.
    Side Effects:
        None.
    """
    totals: dict[str, Decimal] = {}
    for record in records:
        totals[record.symbol] = totals.get(record.symbol, Decimal("0")) + record.signed_amount
    return tuple(
        Holding(symbol=symbol, amount=net)
        for symbol, net in sorted(totals.items())
        if net > 0
    )
