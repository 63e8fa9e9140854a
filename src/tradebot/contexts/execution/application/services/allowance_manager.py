from __future__ import annotations

import logging

from tradebot.contexts.execution.application.ports import (
    EvmChainGateway,
    ReceiptTimeoutError,
    TradeSigner,
)
from tradebot.contexts.execution.application.services.trade_execution_hooks import (
    TradeExecutionHooks,
)
from tradebot.platform.errors import ErrorKind, TradeBotError, UserMessageCategory
from tradebot.shared_kernel.primitives import EvmAddress

log = logging.getLogger(__name__)


class AllowanceApprovalError(TradeBotError):
    """
    AllowanceApprovalError — approval transaction reverted or was not confirmed in time.
    """

    def __init__(self, *, message: str) -> None:
        super().__init__(
            code="allowance_approval_failed",
            message=message,
            kind=ErrorKind.TRADE,
            category=UserMessageCategory.TRADE,
            status_code=502,
        )


class AllowanceManager:
    """
    AllowanceManager — make sure the swap spender may pull the sold token before the swap.

    Related:
      - src/tradebot/contexts/execution/application/ports/evm_chain_gateway.py
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
      - tests/unit/contexts/execution/application/test_allowance_manager.py
    """

    def __init__(
        self,
        *,
        chain: EvmChainGateway,
        receipt_timeout_s: float,
        hooks: TradeExecutionHooks | None = None,
    ) -> None:
        """
        Initialize allowance manager dependencies.

        Args:
            chain: Chain gateway port.
            receipt_timeout_s: Wait budget for the approval receipt.
            hooks: Optional metrics callbacks.
        Returns:
            None.
        Assumptions:
            Same timeout as the swap receipt wait.
        Raises:
            ValueError: If chain is missing or timeout is not positive.
        Side Effects:
            None.
        """
        if chain is None:  # type: ignore[truthy-bool]
            raise ValueError("AllowanceManager requires chain")
        if receipt_timeout_s <= 0:
            raise ValueError("AllowanceManager.receipt_timeout_s must be > 0")
        self._chain = chain
        self._receipt_timeout_s = receipt_timeout_s
        self._hooks = hooks if hooks is not None else TradeExecutionHooks()

    def ensure_allowance(
        self,
        *,
        signer: TradeSigner,
        token_address: EvmAddress,
        spender: EvmAddress,
        required_amount: int,
    ) -> None:
        """
        Approve exactly `required_amount` when current allowance is lower.

        Args:
            signer: Token owner signing material.
            token_address: ERC-20 being sold.
            spender: Aggregator allowance target.
            required_amount: Smallest-unit amount the swap will pull.
        Returns:
            None.
        Assumptions:
            Returns only after the approval is mined successfully.
        Raises:
            AllowanceApprovalError: If approval reverts or is not mined within the timeout.
            ChainUnavailableError: If reads or broadcast fail.
        Side Effects:
            May broadcast one approval transaction.
        """
        current = self._chain.read_allowance(
            token_address=token_address,
            owner=signer.address,
            spender=spender,
        )
        if current >= required_amount:
            log.debug(
                "execution allowance sufficient token=%s spender=%s current=%s required=%s",
                token_address,
                spender,
                current,
                required_amount,
            )
            return

        tx_hash = self._chain.send_approval(
            signer=signer,
            token_address=token_address,
            spender=spender,
            amount=required_amount,
        )
        if self._hooks.on_approval_sent is not None:
            self._hooks.on_approval_sent()
        log.info(
            "execution approval sent token=%s spender=%s amount=%s tx_hash=%s",
            token_address,
            spender,
            required_amount,
            tx_hash,
        )
        try:
            receipt = self._chain.wait_for_receipt(
                tx_hash=tx_hash,
                timeout_s=self._receipt_timeout_s,
            )
        except ReceiptTimeoutError as error:
            raise AllowanceApprovalError(
                message=f"approval {tx_hash} not confirmed within {self._receipt_timeout_s}s",
            ) from error
        if not receipt.succeeded:
            raise AllowanceApprovalError(message=f"approval {tx_hash} reverted")
