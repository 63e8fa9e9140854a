from __future__ import annotations

from dataclasses import dataclass

_MAX_USER_ID_LENGTH = 64


@dataclass(frozen=True, slots=True)
class UserId:
    """
    UserId — opaque front-end user identifier (Telegram user id in decimal form).

    Related:
      - src/tradebot/contexts/custody/domain/entities/user_wallet.py
      - src/tradebot/contexts/ledger/domain/entities/trade_record.py
      - alembic/versions/20261019_0001_tradebot_storage_v1.py
    """

    value: str

    def __post_init__(self) -> None:
        """
        Validate and normalize user identifier text.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Identifier is stored as text key in `tradebot_users` and `tradebot_wallets`.
        Raises:
            ValueError: If value is not a string, blank, too long, or contains whitespace.
        Side Effects:
            Normalizes surrounding whitespace in frozen slot.
        """
        if not isinstance(self.value, str):
            raise ValueError(f"UserId requires str value, got {self.value!r}")
        normalized = self.value.strip()
        if not normalized:
            raise ValueError("UserId must be non-empty")
        if len(normalized) > _MAX_USER_ID_LENGTH:
            raise ValueError(f"UserId length must be <= {_MAX_USER_ID_LENGTH}")
        if any(character.isspace() for character in normalized):
            raise ValueError("UserId must not contain whitespace")
        object.__setattr__(self, "value", normalized)

    @classmethod
    def from_string(cls, raw_value: str) -> UserId:
        """
        Parse user identifier from raw front-end value.

        Args:
            raw_value: Raw identifier string.
        Returns:
            UserId: Parsed user id value object.
        Assumptions:
            Telegram ids arrive as integers and are stringified by the caller.
        Raises:
            ValueError: If value is invalid.
        Side Effects:
            None.
        """
        return cls(raw_value)

    def __str__(self) -> str:
        return self.value
