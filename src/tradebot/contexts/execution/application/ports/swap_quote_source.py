from __future__ import annotations

from typing import Protocol

from tradebot.contexts.execution.domain.entities import SwapQuote
from tradebot.platform.errors import ErrorKind, TradeBotError, UserMessageCategory


class QuoteServiceUnavailableError(TradeBotError):
    """
    QuoteServiceUnavailableError — aggregator unreachable or answered with non-success status.
    """

    def __init__(self, *, message: str) -> None:
        super().__init__(
            code="quote_service_unavailable",
            message=message,
            kind=ErrorKind.NETWORK,
            category=UserMessageCategory.NETWORK,
            status_code=503,
        )


class NoLiquidityError(TradeBotError):
    """
    NoLiquidityError — aggregator reports no route for the requested pair and size.
    """

    def __init__(self) -> None:
        super().__init__(
            code="no_liquidity",
            message="aggregator did not report liquidityAvailable=true",
            kind=ErrorKind.TRADE,
            category=UserMessageCategory.LIQUIDITY,
            status_code=422,
        )


class MalformedQuoteError(TradeBotError):
    """
    MalformedQuoteError — aggregator payload lacks an executable transaction.
    """

    def __init__(self, *, message: str) -> None:
        super().__init__(
            code="malformed_quote",
            message=message,
            kind=ErrorKind.NETWORK,
            category=UserMessageCategory.NETWORK,
            status_code=502,
        )


class SwapQuoteSource(Protocol):
    """
    SwapQuoteSource — DEX aggregator quote port.

    Related:
      - src/tradebot/contexts/execution/adapters/outbound/clients/zerox/zerox_swap_quote_client.py
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
    """

    def fetch_quote(
        self,
        *,
        sell_token: str,
        buy_token: str,
        sell_amount_raw: int,
        taker: str,
    ) -> SwapQuote:
        """
        Request executable quote for selling `sell_amount_raw` of `sell_token`.

        Args:
            sell_token: Token address or native sentinel.
            buy_token: Token address or native sentinel.
            sell_amount_raw: Positive smallest-unit amount.
            taker: Address that will submit the transaction.
        Returns:
            SwapQuote: Normalized quote.
        Assumptions:
            No internal retry; callers decide.
        Raises:
            QuoteServiceUnavailableError: On transport failure or non-success status.
            NoLiquidityError: If aggregator reports no liquidity.
            MalformedQuoteError: If payload has no usable transaction.
        Side Effects:
            One outbound HTTP request.
        """
        ...
