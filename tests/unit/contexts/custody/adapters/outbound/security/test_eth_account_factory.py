from __future__ import annotations

import pytest

from tradebot.contexts.custody.adapters.outbound.security import EthAccountFactory
from tradebot.shared_kernel.primitives import EvmAddress


def test_eth_account_factory_derives_known_address() -> None:
    factory = EthAccountFactory()

    address = factory.address_of(
        private_key_hex="0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
    )

    assert address == EvmAddress("0x2c7536E3605D9C16a7a3D7b1898e529396a65c23")


def test_eth_account_factory_generated_account_matches_its_private_key() -> None:
    """
    Verify generated address is derivable from generated private key.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Private key is rendered as `0x` + 64 hex characters.
    Raises:
        AssertionError: If address and key disagree.
    Side Effects:
        Reads OS CSPRNG.
    """
    factory = EthAccountFactory()

    generated = factory.generate()

    assert len(generated.private_key_hex) == 66
    assert factory.address_of(private_key_hex=generated.private_key_hex) == generated.address
    assert generated.private_key_hex not in repr(generated)


def test_eth_account_factory_rejects_zero_private_key() -> None:
    with pytest.raises(ValueError):
        EthAccountFactory().address_of(private_key_hex="0x" + "0" * 64)
