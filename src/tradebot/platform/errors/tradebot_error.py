from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """
    ErrorKind — failure taxonomy used for propagation and retry policy.

    `user` errors are caller-correctable, `trade` errors are domain failures that are not the
    caller's fault, `network` errors are transient upstream failures retryable by the caller,
    and `crypto` errors indicate corrupted storage or a wrong key and are never retried.
    """

    USER = "user"
    TRADE = "trade"
    NETWORK = "network"
    CRYPTO = "crypto"


class UserMessageCategory(str, Enum):
    """
    UserMessageCategory — non-technical message families rendered by front-ends.
    """

    VALIDATION = "validation"
    WALLET = "wallet"
    LIQUIDITY = "liquidity"
    FUNDS = "funds"
    PRICE_MOVED = "price_moved"
    NETWORK = "network"
    TRADE = "trade"
    UNKNOWN = "unknown"


class TradeBotError(Exception):
    """
    TradeBotError — deterministic classified error for custody, execution and ledger flows.

    Related:
      - src/tradebot/platform/errors/user_messages.py
      - src/tradebot/contexts/execution/application/use_cases/trade_errors.py
      - src/tradebot/contexts/custody/application/use_cases/custody_errors.py
      - apps/api/common/errors.py
    """

    def __init__(
        self,
        *,
        code: str,
        message: str,
        kind: ErrorKind,
        category: UserMessageCategory,
        status_code: int,
        user_message: str | None = None,
    ) -> None:
        """
        Initialize deterministic error fields for logging and front-end mapping.

        Args:
            code: Machine-readable deterministic error code.
            message: Internal diagnostic message (never contains secrets).
            kind: Failure taxonomy bucket.
            category: User-facing message category.
            status_code: HTTP status expected by inbound adapters.
            user_message: Optional explicit user-facing text; category default when omitted.
        Returns:
            None.
        Assumptions:
            Messages never include key material, envelopes, or raw RPC payloads.
        Raises:
            ValueError: If code or message is blank.
        Side Effects:
            None.
        """
        normalized_code = code.strip()
        normalized_message = message.strip()
        if not normalized_code:
            raise ValueError("TradeBotError.code must be non-empty")
        if not normalized_message:
            raise ValueError("TradeBotError.message must be non-empty")
        super().__init__(normalized_message)
        self.code = normalized_code
        self.message = normalized_message
        self.kind = kind
        self.category = category
        self.status_code = status_code
        self.user_message = user_message

    @property
    def is_retryable(self) -> bool:
        """
        Return whether the caller may retry the same operation.

        Args:
            None.
        Returns:
            bool: `True` only for network-kind errors.
        Assumptions:
            Crypto and trade errors require a new user-initiated attempt or operator action.
        Raises:
            None.
        Side Effects:
            None.
        """
        return self.kind is ErrorKind.NETWORK

    def payload(self, *, user_message: str) -> dict[str, dict[str, str]]:
        """
        Build deterministic API payload with stable key order.

        Args:
            user_message: Resolved non-technical message text.
        Returns:
            dict[str, dict[str, str]]: `{"error": {"code", "category", "message"}}` payload.
        Assumptions:
            Internal `message` is never part of the payload.
        Raises:
            None.
        Side Effects:
            None.
        """
        return {
            "error": {
                "code": self.code,
                "category": self.category.value,
                "message": user_message,
            }
        }
