from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
import requests
from web3 import Web3
from web3.exceptions import TimeExhausted, TransactionNotFound

from tradebot.contexts.execution.adapters.outbound.chain import (
    Web3EvmChainGateway,
    Web3EvmChainGatewayConfig,
)
from tradebot.contexts.execution.application.ports import (
    BroadcastOutcomeUnknownError,
    ChainUnavailableError,
    InsufficientFundsError,
    ReceiptTimeoutError,
    TradeSigner,
    TransactionReceipt,
    TransactionSimulationFailedError,
)
from tradebot.platform.errors import ErrorKind, UserMessageCategory
from tradebot.shared_kernel.primitives import EvmAddress

_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
_SIGNER = TradeSigner(
    address=EvmAddress("0x2c7536e3605d9c16a7a3d7b1898e529396a65c23"),
    private_key_hex=_PRIVATE_KEY,
)
_ROUTER = EvmAddress("0x0000000000001ff3684f28c67538d4d072c22734")
_TOKEN = EvmAddress("0x833589fcd6edb6e08f4c7c32d4f71b54bda02913")
_TX_HASH = "0x" + "12" * 32


class _FakeEth:
    """
    Minimal `web3.eth` stand-in with scripted receipt behavior and broadcast capture.
    """

    def __init__(
        self,
        *,
        receipt: dict[str, Any] | None = None,
        receipt_error: Exception | None = None,
        estimate_error: Exception | None = None,
        send_error: Exception | None = None,
        decimals: int = 6,
    ) -> None:
        self._receipt = receipt
        self._receipt_error = receipt_error
        self._estimate_error = estimate_error
        self._send_error = send_error
        self._decimals = decimals
        self.gas_price = 1_000_000
        self.estimated: list[dict[str, Any]] = []
        self.raw_transactions: list[bytes] = []
        self.nonce_requests: list[tuple[str, str]] = []

    def wait_for_transaction_receipt(self, tx_hash: str, timeout: float) -> dict[str, Any]:
        _ = (tx_hash, timeout)
        if self._receipt_error is not None:
            raise self._receipt_error
        assert self._receipt is not None
        return self._receipt

    def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any]:
        _ = tx_hash
        if self._receipt_error is not None:
            raise self._receipt_error
        assert self._receipt is not None
        return self._receipt

    def get_transaction_count(self, address: str, block_identifier: str) -> int:
        self.nonce_requests.append((address, block_identifier))
        return 7

    def estimate_gas(self, transaction: dict[str, Any]) -> int:
        if self._estimate_error is not None:
            raise self._estimate_error
        self.estimated.append(dict(transaction))
        return 180_000

    def send_raw_transaction(self, raw_transaction: bytes) -> bytes:
        self.raw_transactions.append(bytes(raw_transaction))
        if self._send_error is not None:
            raise self._send_error
        return bytes.fromhex("ee" * 32)

    def contract(self, *, address: str, abi: list[dict[str, Any]]) -> Any:
        _ = (address, abi)
        decimals = self._decimals
        return SimpleNamespace(
            functions=SimpleNamespace(
                decimals=lambda: SimpleNamespace(call=lambda: decimals),
            )
        )


def _gateway(eth: _FakeEth) -> Web3EvmChainGateway:
    return Web3EvmChainGateway(
        config=Web3EvmChainGatewayConfig(
            rpc_url="https://mainnet.base.org",
            chain_id=8453,
            request_timeout_s=10.0,
        ),
        web3=SimpleNamespace(eth=eth),  # type: ignore[arg-type]
    )


@pytest.mark.parametrize(
    ("status", "expected"),
    [(1, True), (0, False)],
)
def test_wait_for_receipt_maps_status_flag(status: int, expected: bool) -> None:
    eth = _FakeEth(receipt={"status": status, "blockNumber": 21_000_000})

    receipt = _gateway(eth).wait_for_receipt(tx_hash=_TX_HASH, timeout_s=30.0)

    assert receipt == TransactionReceipt(
        tx_hash=_TX_HASH,
        succeeded=expected,
        block_number=21_000_000,
    )


def test_wait_for_receipt_maps_time_exhausted_to_receipt_timeout() -> None:
    eth = _FakeEth(receipt_error=TimeExhausted("not mined in 30s"))

    with pytest.raises(ReceiptTimeoutError) as error_info:
        _gateway(eth).wait_for_receipt(tx_hash=_TX_HASH, timeout_s=30.0)

    assert error_info.value.tx_hash == _TX_HASH


def test_find_receipt_returns_none_for_unknown_transaction() -> None:
    eth = _FakeEth(receipt_error=TransactionNotFound("Transaction not found"))

    assert _gateway(eth).find_receipt(tx_hash=_TX_HASH) is None


def test_find_receipt_maps_rpc_failure_to_chain_unavailable() -> None:
    eth = _FakeEth(receipt_error=ValueError("upstream rpc error"))

    with pytest.raises(ChainUnavailableError):
        _gateway(eth).find_receipt(tx_hash=_TX_HASH)


def test_send_transaction_signs_locally_with_pending_nonce_and_legacy_gas_price() -> None:
    """
    Verify swap broadcast fills nonce/gas/gasPrice and sends a signed raw transaction.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Signer key is a well-known eth-account test key matching signer address.
        Returned hash is derived from the signed payload, not from the node reply.
    Raises:
        AssertionError: If broadcast fields or returned hash differ.
    Side Effects:
        None.
    """
    eth = _FakeEth()

    tx_hash = _gateway(eth).send_transaction(
        signer=_SIGNER,
        to=_ROUTER,
        data="0x2213bc0b",
        value=10**16,
    )

    assert tx_hash == Web3.to_hex(Web3.keccak(eth.raw_transactions[0]))
    assert tx_hash != "0x" + "ee" * 32
    assert eth.nonce_requests == [("0x2c7536E3605D9C16a7a3D7b1898e529396a65c23", "pending")]
    assert eth.estimated[0]["chainId"] == 8453
    assert eth.estimated[0]["value"] == 10**16
    assert eth.estimated[0]["to"] == "0x0000000000001fF3684f28c67538d4D072C22734"
    assert len(eth.raw_transactions) == 1


def test_send_transaction_maps_estimation_revert_to_simulation_failure() -> None:
    eth = _FakeEth(estimate_error=ValueError("execution reverted: TRANSFER_FROM_FAILED"))

    with pytest.raises(TransactionSimulationFailedError) as error_info:
        _gateway(eth).send_transaction(signer=_SIGNER, to=_ROUTER, data="0x", value=0)

    assert error_info.value.kind is ErrorKind.TRADE
    assert error_info.value.is_retryable is False
    assert eth.raw_transactions == []


def test_send_transaction_maps_insufficient_funds_to_funds_category() -> None:
    eth = _FakeEth(
        estimate_error=ValueError(
            {"code": -32000, "message": "insufficient funds for gas * price + value"}
        )
    )

    with pytest.raises(InsufficientFundsError) as error_info:
        _gateway(eth).send_transaction(signer=_SIGNER, to=_ROUTER, data="0x", value=10**18)

    assert error_info.value.kind is ErrorKind.TRADE
    assert error_info.value.category is UserMessageCategory.FUNDS
    assert error_info.value.status_code == 422
    assert eth.raw_transactions == []


def test_send_transaction_keeps_signed_hash_when_broadcast_transport_fails() -> None:
    eth = _FakeEth(send_error=requests.ReadTimeout("read timed out"))

    with pytest.raises(BroadcastOutcomeUnknownError) as error_info:
        _gateway(eth).send_transaction(signer=_SIGNER, to=_ROUTER, data="0x", value=0)

    assert len(eth.raw_transactions) == 1
    assert error_info.value.tx_hash == Web3.to_hex(Web3.keccak(eth.raw_transactions[0]))
    assert error_info.value.is_retryable is False


def test_send_transaction_maps_node_rejection_after_signing_to_chain_unavailable() -> None:
    eth = _FakeEth(send_error=ValueError({"code": -32000, "message": "nonce too low"}))

    with pytest.raises(ChainUnavailableError):
        _gateway(eth).send_transaction(signer=_SIGNER, to=_ROUTER, data="0x", value=0)


def test_send_transaction_accepts_already_known_broadcast() -> None:
    eth = _FakeEth(send_error=ValueError({"code": -32000, "message": "already known"}))

    tx_hash = _gateway(eth).send_transaction(signer=_SIGNER, to=_ROUTER, data="0x", value=0)

    assert tx_hash == Web3.to_hex(Web3.keccak(eth.raw_transactions[0]))


def test_read_decimals_calls_erc20_contract() -> None:
    assert _gateway(_FakeEth(decimals=6)).read_decimals(token_address=_TOKEN) == 6


def test_chain_config_redacts_rpc_url() -> None:
    config = Web3EvmChainGatewayConfig(
        rpc_url="https://base-mainnet.g.alchemy.com/v2/secret-key",
        chain_id=8453,
        request_timeout_s=5.0,
    )

    assert "secret-key" not in repr(config)
