from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from tradebot.shared_kernel.primitives import EvmAddress


class TokenPriceSource(Protocol):
    """
    TokenPriceSource — best-effort USD price port; failures map to `None`.

    Related:
      - src/tradebot/contexts/execution/adapters/outbound/clients/dexscreener/
        dexscreener_token_price_source.py
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
    """

    def find_price_usd(self, *, token_address: EvmAddress) -> Decimal | None:
        """
        Return current USD unit price or `None` when unavailable.

        Args:
            token_address: ERC-20 contract.
        Returns:
            Decimal | None: Price or `None`.
        Assumptions:
            Implementations never raise for upstream failures.
        Raises:
            None.
        Side Effects:
            One outbound HTTP request.
        """
        ...
