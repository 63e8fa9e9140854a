from __future__ import annotations

import re
from dataclasses import dataclass

from tradebot.shared_kernel.primitives import EvmAddress

_CALLDATA_PATTERN = re.compile(r"^0x([0-9a-fA-F]{2})*$")


@dataclass(frozen=True, slots=True)
class SwapQuote:
    """
    SwapQuote — normalized executable swap transaction returned by the aggregator.

    Transient: quotes are consumed by one trade and never cached.

    Related:
      - src/tradebot/contexts/execution/application/ports/swap_quote_source.py
      - src/tradebot/contexts/execution/adapters/outbound/clients/zerox/zerox_swap_quote_client.py
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
    """

    to: EvmAddress
    data: str
    value: int
    buy_amount: int
    sell_amount: int | None
    allowance_target: EvmAddress | None
    liquidity_available: bool = True

    def __post_init__(self) -> None:
        """
        Validate calldata shape and non-negative integer amounts.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Amounts are smallest-unit integers.
        Raises:
            ValueError: If calldata or one of amounts is invalid.
        Side Effects:
            None.
        """
        if _CALLDATA_PATTERN.match(self.data) is None:
            raise ValueError("SwapQuote.data must be 0x-prefixed even-length hex")
        if self.value < 0:
            raise ValueError("SwapQuote.value must be >= 0")
        if self.buy_amount < 0:
            raise ValueError("SwapQuote.buy_amount must be >= 0")
        if self.sell_amount is not None and self.sell_amount < 0:
            raise ValueError("SwapQuote.sell_amount must be >= 0")
