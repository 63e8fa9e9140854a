from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, localcontext

NATIVE_DECIMALS = 18
_MAX_DECIMALS = 77
# Enough digits for any uint256 value at any supported scale.
_PRECISION = 160


def to_raw_units(*, amount: Decimal, decimals: int) -> int:
    """
    Convert human amount to integer smallest units, truncating sub-unit dust.

    Args:
        amount: Finite human-unit amount.
        decimals: Token decimals.
    Returns:
        int: Raw amount; may be `0` or negative when input is.
    Assumptions:
        Caller rejects non-positive results.
    Raises:
        ValueError: If amount is not finite or decimals are out of range.
    Side Effects:
        None.
    """
    _validate_decimals(decimals=decimals)
    if not amount.is_finite():
        raise ValueError("amount must be a finite decimal")
    with localcontext() as context:
        context.prec = _PRECISION
        scaled = amount.scaleb(decimals)
        return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_raw_units(*, raw_amount: int, decimals: int) -> Decimal:
    """
    Convert integer smallest units to exact human amount.

    Args:
        raw_amount: Raw amount.
        decimals: Token decimals.
    Returns:
        Decimal: Exact human amount without trailing zeros beyond one decimal place.
    Assumptions:
        None.
    Raises:
        ValueError: If decimals are out of range.
    Side Effects:
        None.
    """
    _validate_decimals(decimals=decimals)
    with localcontext() as context:
        context.prec = _PRECISION
        value = Decimal(raw_amount).scaleb(-decimals)
        if value == value.to_integral_value():
            return value.quantize(Decimal("0.0"))
        return value.normalize()


def _validate_decimals(*, decimals: int) -> None:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise ValueError(f"decimals must be int, got {decimals!r}")
    if decimals < 0 or decimals > _MAX_DECIMALS:
        raise ValueError(f"decimals must be in [0, {_MAX_DECIMALS}], got {decimals}")
