from __future__ import annotations

import re

_PRIVATE_KEY_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


def normalize_private_key_hex(raw_value: str) -> str:
    """
    Validate secp256k1 private key literal and return lowercase `0x`-prefixed form.

    Args:
        raw_value: 64 hex characters with optional `0x` prefix.
    Returns:
        str: Normalized `0x` + 64 lowercase hex characters.
    Assumptions:
        Error messages never echo the rejected value.
    Raises:
        ValueError: If value is not exactly 64 hex characters after prefix removal.
    Side Effects:
        None.
    """
    normalized = raw_value.strip()
    if normalized[:2].lower() == "0x":
        normalized = normalized[2:]
    if _PRIVATE_KEY_PATTERN.fullmatch(normalized) is None:
        raise ValueError("private key must be 64 hex characters with optional 0x prefix")
    return "0x" + normalized.lower()
