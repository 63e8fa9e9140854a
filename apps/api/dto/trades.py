"""
Pydantic models and mappers for trade execution API endpoints.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from tradebot.contexts.execution.application.use_cases import BuyTradeResult, SellTradeResult


class TradeRequest(BaseModel):
    """
    API request model for one buy or sell.

    `amount` is ETH for buys and token units for sells; positivity and precision are checked
    by the executor so error messages stay consistent across front-ends.
    """

    model_config = ConfigDict(extra="forbid")

    token_address: str = Field(min_length=1, max_length=64)
    amount: Decimal


class BuyTradeResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tx_hash: str
    symbol: str
    tokens_received: str
    eth_spent: str
    price_usd: str | None


class SellTradeResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tx_hash: str
    symbol: str
    tokens_sold: str
    eth_received: str
    price_usd: str | None


def build_buy_trade_response(*, result: BuyTradeResult) -> BuyTradeResponse:
    return BuyTradeResponse(
        tx_hash=result.tx_hash,
        symbol=result.symbol,
        tokens_received=format(result.tokens_received, "f"),
        eth_spent=format(result.eth_spent, "f"),
        price_usd=_optional_decimal_text(result.price_usd),
    )


def build_sell_trade_response(*, result: SellTradeResult) -> SellTradeResponse:
    return SellTradeResponse(
        tx_hash=result.tx_hash,
        symbol=result.symbol,
        tokens_sold=format(result.tokens_sold, "f"),
        eth_received=format(result.eth_received, "f"),
        price_usd=_optional_decimal_text(result.price_usd),
    )


def _optional_decimal_text(value: Decimal | None) -> str | None:
    if value is None:
        return None
    return format(value, "f")
