from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from .tradebot_error import ErrorKind, TradeBotError, UserMessageCategory

log = logging.getLogger(__name__)

_CATEGORY_MESSAGES: Mapping[UserMessageCategory, str] = {
    UserMessageCategory.VALIDATION: (
        "The request is invalid. Please check the values and try again."
    ),
    UserMessageCategory.WALLET: "Wallet not found. Please use /start to create a wallet.",
    UserMessageCategory.LIQUIDITY: (
        "Insufficient liquidity for this trade. Try a smaller amount or different token."
    ),
    UserMessageCategory.FUNDS: (
        "Insufficient funds for this transaction. Please check your ETH balance."
    ),
    UserMessageCategory.PRICE_MOVED: (
        "Price moved too much during transaction. Please try again with a smaller amount."
    ),
    UserMessageCategory.NETWORK: (
        "Network is experiencing heavy traffic. Please try again in a few minutes."
    ),
    UserMessageCategory.TRADE: (
        "The trade could not be completed. No funds were recorded as traded."
    ),
    UserMessageCategory.UNKNOWN: (
        "An unexpected error occurred. Please try again or contact support if the issue persists."
    ),
}

# Ordered: first matching family wins for unclassified errors.
_KEYWORD_CATEGORIES: tuple[tuple[UserMessageCategory, tuple[str, ...]], ...] = (
    (
        UserMessageCategory.NETWORK,
        ("no backend", "healthy", "timeout", "timed out", "rate limit", "too many requests"),
    ),
    (UserMessageCategory.FUNDS, ("insufficient funds", "gas")),
    (UserMessageCategory.PRICE_MOVED, ("slippage", "price impact")),
    (UserMessageCategory.LIQUIDITY, ("liquidity",)),
)


@dataclass(frozen=True, slots=True)
class UserFacingMessage:
    """
    UserFacingMessage — resolved category and text safe to render to end users.

    Related:
      - src/tradebot/platform/errors/tradebot_error.py
      - apps/api/common/errors.py
    """

    category: UserMessageCategory
    text: str


def resolve_user_facing_message(*, error: BaseException) -> UserFacingMessage:
    """
    Map any raised error to a non-technical message category and text.

    Args:
        error: Raised exception.
    Returns:
        UserFacingMessage: Category and text without internal detail.
    Assumptions:
        User-kind errors carry caller-correctable messages that are safe to display verbatim.
        Crypto errors are never described beyond the generic wallet-unavailable text.
    Raises:
        None.
    Side Effects:
        None.
    """
    if isinstance(error, TradeBotError):
        if error.user_message is not None:
            return UserFacingMessage(category=error.category, text=error.user_message)
        if error.kind is ErrorKind.USER:
            return UserFacingMessage(category=error.category, text=error.message)
        return UserFacingMessage(
            category=error.category,
            text=_CATEGORY_MESSAGES[error.category],
        )

    lowered = str(error).lower()
    for category, keywords in _KEYWORD_CATEGORIES:
        if any(keyword in lowered for keyword in keywords):
            return UserFacingMessage(category=category, text=_CATEGORY_MESSAGES[category])
    return UserFacingMessage(
        category=UserMessageCategory.UNKNOWN,
        text=_CATEGORY_MESSAGES[UserMessageCategory.UNKNOWN],
    )


def report_error(*, error: BaseException, context: Mapping[str, object]) -> UserFacingMessage:
    """
    Log error with server-side detail and return the message to render.

    Args:
        error: Raised exception.
        context: Non-secret request context (user id, operation name).
    Returns:
        UserFacingMessage: Resolved user-facing message.
    Assumptions:
        Function is called from inside an `except` block so tracebacks are available.
    Raises:
        None.
    Side Effects:
        Writes one log record; unclassified errors are logged with traceback.
    """
    resolved = resolve_user_facing_message(error=error)
    rendered_context = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
    if isinstance(error, TradeBotError):
        level = logging.ERROR if error.kind is ErrorKind.CRYPTO else logging.WARNING
        log.log(
            level,
            "tradebot operation failed code=%s kind=%s category=%s message=%s %s",
            error.code,
            error.kind.value,
            error.category.value,
            error.message,
            rendered_context,
        )
        return resolved
    log.exception(
        "tradebot unexpected error type=%s category=%s %s",
        type(error).__name__,
        resolved.category.value,
        rendered_context,
    )
    return resolved
