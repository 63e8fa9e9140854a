from __future__ import annotations

from enum import Enum

NATIVE_ASSET_SENTINEL = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"


class TradeSide(str, Enum):
    """
    TradeSide — direction of a swap against the chain's native asset.

    `buy` spends native ETH for a token; `sell` spends a token for native ETH and is the only
    side that needs an ERC-20 allowance.
    """

    BUY = "buy"
    SELL = "sell"
