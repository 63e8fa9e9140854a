"""
Pydantic models and mappers for holdings and transaction history endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from tradebot.contexts.ledger.domain.entities import Holding, TradeRecord


class HoldingResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    symbol: str
    amount: str


class HoldingsResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: list[HoldingResponse]


class TradeRecordResponse(BaseModel):
    """
    API response model for one ledger row.
    """

    model_config = ConfigDict(extra="forbid")

    record_id: UUID
    symbol: str
    amount: str
    order_type: Literal["buy", "sell"]
    price_usd: str | None
    recorded_at: datetime


class TransactionsResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: list[TradeRecordResponse]


def build_holdings_response(*, holdings: tuple[Holding, ...]) -> HoldingsResponse:
    return HoldingsResponse(
        items=[
            HoldingResponse(symbol=item.symbol, amount=format(item.amount, "f"))
            for item in holdings
        ]
    )


def build_transactions_response(*, records: tuple[TradeRecord, ...]) -> TransactionsResponse:
    """
    Map ledger rows into API response preserving newest-first order.

    Args:
        records: Ledger rows.
    Returns:
        TransactionsResponse: Response payload.
    Assumptions:
        Amounts are unsigned; direction is carried by `order_type`.
    Raises:
        None.
    Side Effects:
        None.
    """
    return TransactionsResponse(
        items=[
            TradeRecordResponse(
                record_id=item.record_id,
                symbol=item.symbol,
                amount=format(item.amount, "f"),
                order_type=item.order_type.value,
                price_usd=format(item.price_usd, "f") if item.price_usd is not None else None,
                recorded_at=item.recorded_at,
            )
            for item in records
        ]
    )
