from __future__ import annotations

from tradebot.contexts.execution.application.ports import (
    BroadcastOutcomeUnknownError,
    ChainUnavailableError,
    InsufficientFundsError,
    MalformedQuoteError,
    NoLiquidityError,
    QuoteServiceUnavailableError,
    TransactionSimulationFailedError,
)
from tradebot.contexts.execution.application.services import (
    AllowanceApprovalError,
    TradeInProgressError,
)
from tradebot.platform.errors import ErrorKind, TradeBotError, UserMessageCategory


class InvalidTradeRequestError(TradeBotError):
    """
    InvalidTradeRequestError — malformed token address or non-finite amount.
    """

    def __init__(self, *, message: str) -> None:
        super().__init__(
            code="invalid_trade_request",
            message=message,
            kind=ErrorKind.USER,
            category=UserMessageCategory.VALIDATION,
            status_code=422,
        )


class AmountTooSmallError(TradeBotError):
    """
    AmountTooSmallError — amount truncates to zero (or less) smallest units.
    """

    def __init__(self) -> None:
        super().__init__(
            code="amount_too_small",
            message="Amount too small. Increase amount.",
            kind=ErrorKind.USER,
            category=UserMessageCategory.VALIDATION,
            status_code=422,
        )


class TransactionFailedError(TradeBotError):
    """
    TransactionFailedError — swap transaction was mined with failure status.
    """

    def __init__(self, *, tx_hash: str) -> None:
        super().__init__(
            code="transaction_failed",
            message=f"transaction {tx_hash} was mined with failure status",
            kind=ErrorKind.TRADE,
            category=UserMessageCategory.TRADE,
            status_code=502,
        )
        self.tx_hash = tx_hash


class ConfirmationUnknownError(TradeBotError):
    """
    ConfirmationUnknownError — swap was broadcast but its outcome is not known yet.

    Not retryable: resubmitting could execute the trade twice. Reconciliation settles it.
    """

    def __init__(self, *, tx_hash: str) -> None:
        super().__init__(
            code="confirmation_unknown",
            message=f"transaction {tx_hash} outcome unknown after receipt wait",
            kind=ErrorKind.TRADE,
            category=UserMessageCategory.TRADE,
            status_code=504,
            user_message=(
                "Your transaction was sent but is not confirmed yet. "
                "Check your history before trying again."
            ),
        )
        self.tx_hash = tx_hash


class TradeRecordingPendingError(TradeBotError):
    """
    TradeRecordingPendingError — trade confirmed on-chain but the ledger write failed.
    """

    def __init__(self, *, tx_hash: str) -> None:
        super().__init__(
            code="trade_recording_pending",
            message=f"transaction {tx_hash} confirmed but ledger write failed",
            kind=ErrorKind.TRADE,
            category=UserMessageCategory.TRADE,
            status_code=500,
            user_message=(
                "Your trade went through but could not be added to your history yet. "
                "It will appear shortly."
            ),
        )
        self.tx_hash = tx_hash


class TradeAttemptConflictError(TradeBotError):
    """
    TradeAttemptConflictError — attempt row changed under a concurrent writer.

    The caller lost the compare-and-set and must not act on its stale snapshot.
    """

    def __init__(self, *, attempt_id: str, expected_status: str) -> None:
        super().__init__(
            code="trade_attempt_conflict",
            message=(
                f"trade attempt {attempt_id} is no longer in status {expected_status}"
            ),
            kind=ErrorKind.TRADE,
            category=UserMessageCategory.TRADE,
            status_code=409,
        )
        self.attempt_id = attempt_id
        self.expected_status = expected_status


__all__ = [
    "AllowanceApprovalError",
    "AmountTooSmallError",
    "BroadcastOutcomeUnknownError",
    "ChainUnavailableError",
    "ConfirmationUnknownError",
    "InsufficientFundsError",
    "InvalidTradeRequestError",
    "MalformedQuoteError",
    "NoLiquidityError",
    "QuoteServiceUnavailableError",
    "TradeAttemptConflictError",
    "TradeInProgressError",
    "TradeRecordingPendingError",
    "TransactionFailedError",
    "TransactionSimulationFailedError",
]
