from .evm_chain_gateway import (
    BroadcastOutcomeUnknownError,
    ChainUnavailableError,
    EvmChainGateway,
    InsufficientFundsError,
    ReceiptTimeoutError,
    TradeSigner,
    TransactionReceipt,
    TransactionSimulationFailedError,
)
from .swap_quote_source import (
    MalformedQuoteError,
    NoLiquidityError,
    QuoteServiceUnavailableError,
    SwapQuoteSource,
)
from .token_price_source import TokenPriceSource
from .trade_attempt_repository import TradeAttemptRepository
from .trade_recorder import TradeRecorder
from .trade_signer_resolver import TradeSignerResolver

__all__ = [
    "BroadcastOutcomeUnknownError",
    "ChainUnavailableError",
    "EvmChainGateway",
    "InsufficientFundsError",
    "MalformedQuoteError",
    "NoLiquidityError",
    "QuoteServiceUnavailableError",
    "ReceiptTimeoutError",
    "SwapQuoteSource",
    "TokenPriceSource",
    "TradeAttemptRepository",
    "TradeRecorder",
    "TradeSigner",
    "TradeSignerResolver",
    "TransactionReceipt",
    "TransactionSimulationFailedError",
]
