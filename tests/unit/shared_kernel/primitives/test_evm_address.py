from __future__ import annotations

import pytest

from tradebot.shared_kernel.primitives import EvmAddress


def test_evm_address_canonicalizes_checksum_casing_to_lowercase() -> None:
    """
    Verify mixed-case checksum address is stored in lowercase canonical form.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Equality between addresses must not depend on checksum casing.
    Raises:
        AssertionError: If normalization or equality is broken.
    Side Effects:
        None.
    """
    checksummed = EvmAddress(" 0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913 ")
    lowered = EvmAddress("0x833589fcd6edb6e08f4c7c32d4f71b54bda02913")

    assert str(checksummed) == "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"
    assert checksummed == lowered


@pytest.mark.parametrize(
    "raw_value",
    [
        "",
        "833589fcd6edb6e08f4c7c32d4f71b54bda02913",
        "0x833589fcd6edb6e08f4c7c32d4f71b54bda0291",
        "0xZZ3589fcd6edb6e08f4c7c32d4f71b54bda02913",
    ],
)
def test_evm_address_rejects_malformed_values(raw_value: str) -> None:
    assert EvmAddress.is_valid(raw_value) is False
    with pytest.raises(ValueError):
        EvmAddress(raw_value)
