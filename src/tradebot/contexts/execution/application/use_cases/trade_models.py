from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any


@dataclass(frozen=True, slots=True)
class BuyTradeResult:
    """
    BuyTradeResult — outcome of a confirmed and recorded buy.

    Related:
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
      - apps/api/dto/trades.py
    """

    tx_hash: str
    symbol: str
    tokens_received: Decimal
    eth_spent: Decimal
    price_usd: Decimal | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tx_hash": self.tx_hash,
            "symbol": self.symbol,
            "tokens_received": self.tokens_received,
            "eth_spent": self.eth_spent,
            "price_usd": self.price_usd,
        }


@dataclass(frozen=True, slots=True)
class SellTradeResult:
    """
    SellTradeResult — outcome of a confirmed and recorded sell.

    Related:
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
      - apps/api/dto/trades.py
    """

    tx_hash: str
    symbol: str
    tokens_sold: Decimal
    eth_received: Decimal
    price_usd: Decimal | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tx_hash": self.tx_hash,
            "symbol": self.symbol,
            "tokens_sold": self.tokens_sold,
            "eth_received": self.eth_received,
            "price_usd": self.price_usd,
        }
