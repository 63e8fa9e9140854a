from __future__ import annotations

import logging

import pytest

from tradebot.platform.errors import (
    ErrorKind,
    TradeBotError,
    UserMessageCategory,
    report_error,
    resolve_user_facing_message,
)


def _error(
    *,
    kind: ErrorKind,
    category: UserMessageCategory,
    message: str = "internal detail",
    user_message: str | None = None,
) -> TradeBotError:
    return TradeBotError(
        code="sample_code",
        message=message,
        kind=kind,
        category=category,
        status_code=400,
        user_message=user_message,
    )


@pytest.mark.parametrize(
    ("raw_message", "category"),
    [
        ("no backend is currently healthy to serve traffic", UserMessageCategory.NETWORK),
        ("HTTPSConnectionPool: Read timed out.", UserMessageCategory.NETWORK),
        ("429 Too Many Requests", UserMessageCategory.NETWORK),
        ("insufficient funds for gas * price + value", UserMessageCategory.FUNDS),
        ("execution reverted: slippage exceeded", UserMessageCategory.PRICE_MOVED),
        ("quote failed: price impact too high", UserMessageCategory.PRICE_MOVED),
        ("not enough liquidity in pool", UserMessageCategory.LIQUIDITY),
        ("division by zero", UserMessageCategory.UNKNOWN),
    ],
)
def test_unclassified_errors_map_by_keyword_family(
    raw_message: str,
    category: UserMessageCategory,
) -> None:
    resolved = resolve_user_facing_message(error=RuntimeError(raw_message))

    assert resolved.category is category
    assert raw_message not in resolved.text


def test_user_kind_error_shows_its_own_message() -> None:
    error = _error(
        kind=ErrorKind.USER,
        category=UserMessageCategory.VALIDATION,
        message="Amount too small. Increase amount.",
    )

    resolved = resolve_user_facing_message(error=error)

    assert resolved.text == "Amount too small. Increase amount."


def test_non_user_error_hides_internal_message() -> None:
    """
    Verify trade and crypto errors render category defaults, never diagnostic messages.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Diagnostic messages may contain tx hashes or RPC details.
    Raises:
        AssertionError: If internal message leaks into user text.
    Side Effects:
        None.
    """
    trade = resolve_user_facing_message(
        error=_error(kind=ErrorKind.TRADE, category=UserMessageCategory.TRADE),
    )
    crypto = resolve_user_facing_message(
        error=_error(kind=ErrorKind.CRYPTO, category=UserMessageCategory.WALLET),
    )

    assert trade.text == "The trade could not be completed. No funds were recorded as traded."
    assert crypto.text == "Wallet not found. Please use /start to create a wallet."
    assert "internal detail" not in trade.text + crypto.text


def test_explicit_user_message_wins_over_category_default() -> None:
    error = _error(
        kind=ErrorKind.TRADE,
        category=UserMessageCategory.TRADE,
        user_message="Your transaction was sent but is not confirmed yet.",
    )

    assert resolve_user_facing_message(error=error).text == (
        "Your transaction was sent but is not confirmed yet."
    )


def test_report_error_logs_crypto_errors_at_error_level(caplog: pytest.LogCaptureFixture) -> None:
    error = _error(kind=ErrorKind.CRYPTO, category=UserMessageCategory.WALLET)

    with caplog.at_level(logging.WARNING, logger="tradebot.platform.errors.user_messages"):
        resolved = report_error(error=error, context={"user_id": "42", "operation": "buy"})

    assert resolved.category is UserMessageCategory.WALLET
    assert caplog.records[-1].levelno == logging.ERROR
    assert "code=sample_code" in caplog.records[-1].getMessage()
    assert "operation=buy user_id=42" in caplog.records[-1].getMessage()


def test_report_error_logs_unclassified_errors_with_traceback(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.ERROR, logger="tradebot.platform.errors.user_messages"):
        try:
            raise KeyError("missing")
        except KeyError as error:
            resolved = report_error(error=error, context={})

    assert resolved.category is UserMessageCategory.UNKNOWN
    assert caplog.records[-1].exc_info is not None


def test_tradebot_error_requires_code_and_message() -> None:
    with pytest.raises(ValueError, match="code"):
        TradeBotError(
            code=" ",
            message="x",
            kind=ErrorKind.USER,
            category=UserMessageCategory.VALIDATION,
            status_code=422,
        )
    with pytest.raises(ValueError, match="message"):
        TradeBotError(
            code="x",
            message="",
            kind=ErrorKind.USER,
            category=UserMessageCategory.VALIDATION,
            status_code=422,
        )
