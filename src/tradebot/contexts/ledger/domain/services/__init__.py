from .holdings_derivation import derive_holdings

__all__ = [
    "derive_holdings",
]
