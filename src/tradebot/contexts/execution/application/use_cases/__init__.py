from .execute_trade import ExecuteTradeUseCase
from .reconcile_trade_attempts import ReconcileTradeAttemptsUseCase, ReconciliationReport
from .trade_errors import (
    AllowanceApprovalError,
    AmountTooSmallError,
    BroadcastOutcomeUnknownError,
    ChainUnavailableError,
    ConfirmationUnknownError,
    InsufficientFundsError,
    InvalidTradeRequestError,
    MalformedQuoteError,
    NoLiquidityError,
    QuoteServiceUnavailableError,
    TradeAttemptConflictError,
    TradeInProgressError,
    TradeRecordingPendingError,
    TransactionFailedError,
    TransactionSimulationFailedError,
)
from .trade_models import BuyTradeResult, SellTradeResult

__all__ = [
    "AllowanceApprovalError",
    "AmountTooSmallError",
    "BroadcastOutcomeUnknownError",
    "BuyTradeResult",
    "ChainUnavailableError",
    "ConfirmationUnknownError",
    "ExecuteTradeUseCase",
    "InsufficientFundsError",
    "InvalidTradeRequestError",
    "MalformedQuoteError",
    "NoLiquidityError",
    "QuoteServiceUnavailableError",
    "ReconcileTradeAttemptsUseCase",
    "ReconciliationReport",
    "SellTradeResult",
    "TradeAttemptConflictError",
    "TradeInProgressError",
    "TradeRecordingPendingError",
    "TransactionFailedError",
    "TransactionSimulationFailedError",
]
