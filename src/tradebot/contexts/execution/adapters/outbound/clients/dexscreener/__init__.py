from .dexscreener_token_price_source import (
    DexScreenerTokenPriceSource,
    DexScreenerTokenPriceSourceConfig,
)

__all__ = [
    "DexScreenerTokenPriceSource",
    "DexScreenerTokenPriceSourceConfig",
]
