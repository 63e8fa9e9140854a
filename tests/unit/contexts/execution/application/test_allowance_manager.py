from __future__ import annotations

import pytest

from tradebot.contexts.execution.application.ports import (
    ReceiptTimeoutError,
    TradeSigner,
    TransactionReceipt,
)
from tradebot.contexts.execution.application.services import (
    AllowanceApprovalError,
    AllowanceManager,
    TradeExecutionHooks,
)
from tradebot.shared_kernel.primitives import EvmAddress

_OWNER = EvmAddress("0x2c7536e3605d9c16a7a3d7b1898e529396a65c23")
_TOKEN = EvmAddress("0x833589fcd6edb6e08f4c7c32d4f71b54bda02913")
_SPENDER = EvmAddress("0x000000000022d473030f116ddee9f6b43ac78ba3")
_SIGNER = TradeSigner(address=_OWNER, private_key_hex="0x" + "22" * 32)
_APPROVAL_HASH = "0x" + "ab" * 32


class _AllowanceChainStub:
    """
    Chain stub exposing allowance reads, approval broadcast, and one scripted receipt.
    """

    def __init__(self, *, allowance: int, receipt_outcome: str = "success") -> None:
        self._allowance = allowance
        self._receipt_outcome = receipt_outcome
        self.allowance_reads: list[tuple[EvmAddress, EvmAddress, EvmAddress]] = []
        self.approvals: list[tuple[EvmAddress, EvmAddress, int]] = []
        self.waits: list[tuple[str, float]] = []

    def read_allowance(
        self,
        *,
        token_address: EvmAddress,
        owner: EvmAddress,
        spender: EvmAddress,
    ) -> int:
        self.allowance_reads.append((token_address, owner, spender))
        return self._allowance

    def send_approval(
        self,
        *,
        signer: TradeSigner,
        token_address: EvmAddress,
        spender: EvmAddress,
        amount: int,
    ) -> str:
        assert signer is _SIGNER
        self.approvals.append((token_address, spender, amount))
        return _APPROVAL_HASH

    def wait_for_receipt(self, *, tx_hash: str, timeout_s: float) -> TransactionReceipt:
        self.waits.append((tx_hash, timeout_s))
        if self._receipt_outcome == "timeout":
            raise ReceiptTimeoutError(tx_hash=tx_hash, timeout_s=timeout_s)
        return TransactionReceipt(
            tx_hash=tx_hash,
            succeeded=self._receipt_outcome == "success",
            block_number=9,
        )


def test_allowance_manager_skips_approval_when_allowance_covers_amount() -> None:
    chain = _AllowanceChainStub(allowance=1_000_000)
    manager = AllowanceManager(chain=chain, receipt_timeout_s=30.0)

    manager.ensure_allowance(
        signer=_SIGNER,
        token_address=_TOKEN,
        spender=_SPENDER,
        required_amount=1_000_000,
    )

    assert chain.allowance_reads == [(_TOKEN, _OWNER, _SPENDER)]
    assert chain.approvals == []
    assert chain.waits == []


def test_allowance_manager_approves_exact_amount_and_waits_for_receipt() -> None:
    """
    Verify insufficient allowance triggers one exact-amount approval mined before return.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Approval never uses an unlimited amount.
    Raises:
        AssertionError: If approval amount, wait, or hook call is wrong.
    Side Effects:
        None.
    """
    chain = _AllowanceChainStub(allowance=999_999)
    approvals_sent: list[None] = []
    manager = AllowanceManager(
        chain=chain,
        receipt_timeout_s=45.0,
        hooks=TradeExecutionHooks(on_approval_sent=lambda: approvals_sent.append(None)),
    )

    manager.ensure_allowance(
        signer=_SIGNER,
        token_address=_TOKEN,
        spender=_SPENDER,
        required_amount=1_000_000,
    )

    assert chain.approvals == [(_TOKEN, _SPENDER, 1_000_000)]
    assert chain.waits == [(_APPROVAL_HASH, 45.0)]
    assert approvals_sent == [None]


@pytest.mark.parametrize("receipt_outcome", ["reverted", "timeout"])
def test_allowance_manager_raises_when_approval_is_not_mined_successfully(
    receipt_outcome: str,
) -> None:
    chain = _AllowanceChainStub(allowance=0, receipt_outcome=receipt_outcome)
    manager = AllowanceManager(chain=chain, receipt_timeout_s=10.0)

    with pytest.raises(AllowanceApprovalError) as error_info:
        manager.ensure_allowance(
            signer=_SIGNER,
            token_address=_TOKEN,
            spender=_SPENDER,
            required_amount=5,
        )

    assert error_info.value.code == "allowance_approval_failed"


def test_allowance_manager_rejects_non_positive_timeout() -> None:
    with pytest.raises(ValueError, match="receipt_timeout_s"):
        AllowanceManager(chain=_AllowanceChainStub(allowance=0), receipt_timeout_s=0)
