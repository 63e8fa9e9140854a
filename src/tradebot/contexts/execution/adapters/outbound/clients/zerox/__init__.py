from .zerox_swap_quote_client import ZeroXSwapQuoteClient, ZeroXSwapQuoteClientConfig

__all__ = [
    "ZeroXSwapQuoteClient",
    "ZeroXSwapQuoteClientConfig",
]
