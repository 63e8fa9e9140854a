from .alchemy_token_balance_source import (
    AlchemyTokenBalanceSource,
    AlchemyTokenBalanceSourceConfig,
)

__all__ = [
    "AlchemyTokenBalanceSource",
    "AlchemyTokenBalanceSourceConfig",
]
