from __future__ import annotations

from datetime import datetime


def ensure_utc_datetime(*, name: str, value: datetime) -> datetime:
    """
    Validate datetime is timezone-aware UTC and return same value.

    Args:
        name: Field label for deterministic error messages.
        value: Datetime value to validate.
    Returns:
        datetime: Same validated datetime.
    Assumptions:
        UTC datetimes have zero offset.
    Raises:
        ValueError: If datetime is naive or non-UTC.
    Side Effects:
        None.
    """
    offset = value.utcoffset()
    if value.tzinfo is None or offset is None:
        raise ValueError(f"{name} must be timezone-aware UTC datetime")
    if offset.total_seconds() != 0:
        raise ValueError(f"{name} must be UTC datetime")
    return value
