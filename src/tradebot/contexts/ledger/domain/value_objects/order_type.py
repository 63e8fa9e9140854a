from __future__ import annotations

from decimal import Decimal
from enum import Enum


class OrderType(str, Enum):
    """
    OrderType — side of one recorded trade; buys add to and sells subtract from holdings.

    Related:
      - src/tradebot/contexts/ledger/domain/entities/trade_record.py
      - src/tradebot/contexts/ledger/domain/services/holdings_derivation.py
      - alembic/versions/20261019_0001_tradebot_storage_v1.py
    """

    BUY = "buy"
    SELL = "sell"

    def signed(self, amount: Decimal) -> Decimal:
        """
        Apply order-type sign to an unsigned magnitude.

        Args:
            amount: Unsigned trade amount.
        Returns:
            Decimal: `+amount` for buys, `-amount` for sells.
        Assumptions:
            Amount magnitude is validated by `TradeRecord`.
        Raises:
            None.
        Side Effects:
            None.
        """
        return amount if self is OrderType.BUY else -amount

    @classmethod
    def parse(cls, raw_value: str) -> OrderType:
        """
        Parse order type literal case-insensitively.

        Args:
            raw_value: Raw literal (`buy` or `sell`).
        Returns:
            OrderType: Parsed enum member.
        Assumptions:
            None.
        Raises:
            ValueError: If literal is unsupported.
        Side Effects:
            None.
        """
        normalized = raw_value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"OrderType must be one of 'buy', 'sell', got {raw_value!r}")
