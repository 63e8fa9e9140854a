from __future__ import annotations

import re
from dataclasses import dataclass

_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


@dataclass(frozen=True, slots=True)
class EvmAddress:
    """
    EvmAddress — 20-byte EVM account or contract address in lowercase canonical form.

    Related:
      - src/tradebot/contexts/execution/domain/entities/swap_quote.py
      - src/tradebot/contexts/execution/adapters/outbound/chain/web3_evm_chain_gateway.py
      - src/tradebot/contexts/custody/domain/entities/user_wallet.py
    """

    value: str

    def __post_init__(self) -> None:
        """
        Validate hex address shape and canonicalize to lowercase.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Checksum casing is not verified here; chain adapters re-checksum before use.
        Raises:
            ValueError: If value is not `0x` followed by 40 hex characters.
        Side Effects:
            Normalizes value in frozen slot.
        """
        if not isinstance(self.value, str):
            raise ValueError(f"EvmAddress requires str value, got {self.value!r}")
        normalized = self.value.strip()
        if _ADDRESS_PATTERN.match(normalized) is None:
            raise ValueError(f"EvmAddress must be 0x-prefixed 40 hex chars, got {normalized!r}")
        object.__setattr__(self, "value", normalized.lower())

    @classmethod
    def is_valid(cls, raw_value: str) -> bool:
        """
        Check whether raw text is a syntactically valid EVM address.

        Args:
            raw_value: Raw address text.
        Returns:
            bool: `True` when `EvmAddress(raw_value)` would succeed.
        Assumptions:
            None.
        Raises:
            None.
        Side Effects:
            None.
        """
        return isinstance(raw_value, str) and _ADDRESS_PATTERN.match(raw_value.strip()) is not None

    def __str__(self) -> str:
        return self.value
