from .custody_signer_resolver import CustodyTradeSignerResolver

__all__ = [
    "CustodyTradeSignerResolver",
]
