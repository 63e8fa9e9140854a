from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tradebot.shared_kernel.primitives import EvmAddress

PLACEHOLDER_SYMBOL = "TOKEN"


@dataclass(frozen=True, slots=True)
class AssetDescription:
    """
    AssetDescription — decimals, display symbol, and best-effort USD price of one token.

    Decimals are authoritative; symbol falls back to `TOKEN` and price to `None` when their
    sources fail.

    Related:
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
    """

    token_address: EvmAddress
    decimals: int
    symbol: str
    price_usd: Decimal | None

    def __post_init__(self) -> None:
        if self.decimals < 0:
            raise ValueError("AssetDescription.decimals must be >= 0")
        if not self.symbol.strip():
            raise ValueError("AssetDescription.symbol must be non-empty")
