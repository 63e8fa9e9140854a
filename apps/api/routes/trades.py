"""
Trade execution API routes.
"""

from __future__ import annotations

from fastapi import APIRouter

from apps.api.common import parse_user_id
from apps.api.dto import (
    BuyTradeResponse,
    SellTradeResponse,
    TradeRequest,
    build_buy_trade_response,
    build_sell_trade_response,
)
from tradebot.contexts.execution.application.use_cases import ExecuteTradeUseCase


def build_trades_router(*, execute_trade: ExecuteTradeUseCase) -> APIRouter:
    """
    Build trades router exposing synchronous buy and sell endpoints.

    Related:
      - apps/api/dto/trades.py
      - apps/api/wiring/modules/tradebot.py
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py

    Args:
        execute_trade: Trade pipeline use-case.
    Returns:
        APIRouter: Configured trades router.
    Assumptions:
        Handlers are sync so FastAPI runs the blocking pipeline in its worker thread pool.
    Raises:
        ValueError: If dependency is missing.
    Side Effects:
        None.
    """
    if execute_trade is None:  # type: ignore[truthy-bool]
        raise ValueError("build_trades_router requires execute_trade")

    router = APIRouter(tags=["trades"])

    @router.post("/users/{user_id}/trades/buy", response_model=BuyTradeResponse)
    def post_buy(user_id: str, request: TradeRequest) -> BuyTradeResponse:
        """
        Spend `amount` ETH on `token_address` and wait for confirmation.

        Args:
            user_id: Front-end user identifier.
            request: Token address and ETH amount.
        Returns:
            BuyTradeResponse: Confirmed trade outcome.
        Assumptions:
            Response is sent only after the ledger row is written.
        Raises:
            TradeBotError: Classified validation, trade, network, or crypto errors.
        Side Effects:
            Broadcasts transactions and writes staging and ledger rows.
        """
        result = execute_trade.execute_buy(
            user_id=parse_user_id(user_id),
            token_address=request.token_address,
            eth_amount=request.amount,
        )
        return build_buy_trade_response(result=result)

    @router.post("/users/{user_id}/trades/sell", response_model=SellTradeResponse)
    def post_sell(user_id: str, request: TradeRequest) -> SellTradeResponse:
        result = execute_trade.execute_sell(
            user_id=parse_user_id(user_id),
            token_address=request.token_address,
            token_amount=request.amount,
        )
        return build_sell_trade_response(result=result)

    return router
