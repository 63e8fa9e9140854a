from __future__ import annotations

import pytest

from tradebot.shared_kernel.primitives import UserId


def test_user_id_strips_surrounding_whitespace() -> None:
    """
    Verify front-end identifier is normalized and rendered back as plain text.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Telegram ids are passed as decimal strings.
    Raises:
        AssertionError: If normalization is broken.
    Side Effects:
        None.
    """
    user_id = UserId.from_string("  123456789 ")

    assert str(user_id) == "123456789"
    assert user_id == UserId("123456789")


@pytest.mark.parametrize("raw_value", ["", "   ", "12 34", "x" * 65])
def test_user_id_rejects_invalid_values(raw_value: str) -> None:
    with pytest.raises(ValueError):
        UserId.from_string(raw_value)
