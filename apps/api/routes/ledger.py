"""
Holdings and transaction history API routes.
"""

from __future__ import annotations

from fastapi import APIRouter

from apps.api.common import parse_user_id
from apps.api.dto import (
    HoldingsResponse,
    TransactionsResponse,
    build_holdings_response,
    build_transactions_response,
)
from tradebot.contexts.ledger.application.use_cases import (
    ListHoldingsUseCase,
    ListTradeHistoryUseCase,
)


def build_ledger_router(
    *,
    list_holdings: ListHoldingsUseCase,
    list_trade_history: ListTradeHistoryUseCase,
) -> APIRouter:
    """
    Build ledger router exposing derived holdings and recent transactions.

    Related:
      - apps/api/dto/ledger.py
      - apps/api/wiring/modules/tradebot.py
      - src/tradebot/contexts/ledger/application/use_cases/list_trade_history.py

    Args:
        list_holdings: Holdings derivation use-case.
        list_trade_history: History listing use-case.
    Returns:
        APIRouter: Configured ledger router.
    Assumptions:
        History limit bounds are enforced in use-case layer.
    Raises:
        ValueError: If one required dependency is missing.
    Side Effects:
        None.
    """
    if list_holdings is None:  # type: ignore[truthy-bool]
        raise ValueError("build_ledger_router requires list_holdings")
    if list_trade_history is None:  # type: ignore[truthy-bool]
        raise ValueError("build_ledger_router requires list_trade_history")

    router = APIRouter(tags=["ledger"])

    @router.get("/users/{user_id}/holdings", response_model=HoldingsResponse)
    def get_holdings(user_id: str) -> HoldingsResponse:
        holdings = list_holdings.list_current(user_id=parse_user_id(user_id))
        return build_holdings_response(holdings=holdings)

    @router.get("/users/{user_id}/transactions", response_model=TransactionsResponse)
    def get_transactions(user_id: str, limit: int | None = None) -> TransactionsResponse:
        records = list_trade_history.list_recent(user_id=parse_user_id(user_id), limit=limit)
        return build_transactions_response(records=records)

    return router
