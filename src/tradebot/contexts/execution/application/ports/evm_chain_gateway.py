from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from tradebot.platform.errors import ErrorKind, TradeBotError, UserMessageCategory
from tradebot.shared_kernel.primitives import EvmAddress


@dataclass(frozen=True, slots=True)
class TradeSigner:
    """
    TradeSigner — address and decrypted key used to sign one trade's transactions.
    """

    address: EvmAddress
    private_key_hex: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class TransactionReceipt:
    """
    TransactionReceipt — mined transaction outcome.
    """

    tx_hash: str
    succeeded: bool
    block_number: int | None


class ReceiptTimeoutError(Exception):
    """
    ReceiptTimeoutError — transaction was not mined within the wait budget.
    """

    def __init__(self, *, tx_hash: str, timeout_s: float) -> None:
        super().__init__(f"receipt for {tx_hash} not available after {timeout_s}s")
        self.tx_hash = tx_hash
        self.timeout_s = timeout_s


class ChainUnavailableError(TradeBotError):
    """
    ChainUnavailableError — RPC node unreachable or rejected a read/broadcast.
    """

    def __init__(self, *, message: str) -> None:
        super().__init__(
            code="chain_unavailable",
            message=message,
            kind=ErrorKind.NETWORK,
            category=UserMessageCategory.NETWORK,
            status_code=503,
        )


class InsufficientFundsError(TradeBotError):
    """
    InsufficientFundsError — signer cannot cover value plus gas for the transaction.
    """

    def __init__(self, *, message: str) -> None:
        super().__init__(
            code="insufficient_funds",
            message=message,
            kind=ErrorKind.TRADE,
            category=UserMessageCategory.FUNDS,
            status_code=422,
        )


class TransactionSimulationFailedError(TradeBotError):
    """
    TransactionSimulationFailedError — node reverted the call during gas estimation.
    """

    def __init__(self, *, message: str) -> None:
        super().__init__(
            code="transaction_simulation_failed",
            message=message,
            kind=ErrorKind.TRADE,
            category=UserMessageCategory.TRADE,
            status_code=422,
        )


class BroadcastOutcomeUnknownError(TradeBotError):
    """
    BroadcastOutcomeUnknownError — signed transaction left the process but acceptance is unknown.

    The hash is derived from the signed payload, so the caller can still look it up on chain.
    """

    def __init__(self, *, message: str, tx_hash: str) -> None:
        super().__init__(
            code="broadcast_outcome_unknown",
            message=message,
            kind=ErrorKind.TRADE,
            category=UserMessageCategory.TRADE,
            status_code=504,
            user_message=(
                "Your transaction may have been sent. "
                "Check your history before trying again."
            ),
        )
        self.tx_hash = tx_hash


class EvmChainGateway(Protocol):
    """
    EvmChainGateway — chain reads, signed broadcasts, and receipt waits for one EVM chain.

    Related:
      - src/tradebot/contexts/execution/adapters/outbound/chain/web3_evm_chain_gateway.py
      - src/tradebot/contexts/execution/application/services/allowance_manager.py
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
    """

    def read_decimals(self, *, token_address: EvmAddress) -> int:
        """
        Read ERC-20 `decimals()`.

        Args:
            token_address: ERC-20 contract.
        Returns:
            int: Token decimals.
        Assumptions:
            None.
        Raises:
            ChainUnavailableError: If call fails.
        Side Effects:
            One RPC call.
        """
        ...

    def read_symbol(self, *, token_address: EvmAddress) -> str:
        """
        Read ERC-20 `symbol()`.

        Args:
            token_address: ERC-20 contract.
        Returns:
            str: Token symbol.
        Assumptions:
            Caller treats failures as best-effort.
        Raises:
            ChainUnavailableError: If call fails.
        Side Effects:
            One RPC call.
        """
        ...

    def read_allowance(
        self,
        *,
        token_address: EvmAddress,
        owner: EvmAddress,
        spender: EvmAddress,
    ) -> int:
        """
        Read ERC-20 `allowance(owner, spender)`.

        Args:
            token_address: ERC-20 contract.
            owner: Token owner.
            spender: Approved spender.
        Returns:
            int: Current allowance in smallest units.
        Assumptions:
            None.
        Raises:
            ChainUnavailableError: If call fails.
        Side Effects:
            One RPC call.
        """
        ...

    def send_transaction(
        self,
        *,
        signer: TradeSigner,
        to: EvmAddress,
        data: str,
        value: int,
    ) -> str:
        """
        Sign and broadcast a contract call.

        Args:
            signer: Signing material.
            to: Target contract.
            data: `0x`-prefixed calldata.
            value: Native value in wei.
        Returns:
            str: `0x`-prefixed transaction hash.
        Assumptions:
            Nonce, gas, and fees are resolved by the implementation.
        Raises:
            InsufficientFundsError: If signer balance cannot cover value plus gas.
            TransactionSimulationFailedError: If gas estimation reverts.
            BroadcastOutcomeUnknownError: If broadcast fails after signing with unknown outcome.
            ChainUnavailableError: If signing inputs are rejected or broadcast fails.
        Side Effects:
            Broadcasts one transaction.
        """
        ...

    def send_approval(
        self,
        *,
        signer: TradeSigner,
        token_address: EvmAddress,
        spender: EvmAddress,
        amount: int,
    ) -> str:
        """
        Sign and broadcast ERC-20 `approve(spender, amount)`.

        Args:
            signer: Signing material.
            token_address: ERC-20 contract.
            spender: Spender to approve.
            amount: Allowance in smallest units.
        Returns:
            str: `0x`-prefixed transaction hash.
        Assumptions:
            None.
        Raises:
            InsufficientFundsError: If signer balance cannot cover gas.
            BroadcastOutcomeUnknownError: If broadcast fails after signing with unknown outcome.
            ChainUnavailableError: If broadcast fails.
        Side Effects:
            Broadcasts one transaction.
        """
        ...

    def wait_for_receipt(self, *, tx_hash: str, timeout_s: float) -> TransactionReceipt:
        """
        Block until transaction is mined or timeout elapses.

        Args:
            tx_hash: Broadcast hash.
            timeout_s: Wait budget in seconds.
        Returns:
            TransactionReceipt: Mined outcome.
        Assumptions:
            None.
        Raises:
            ReceiptTimeoutError: If not mined within budget.
            ChainUnavailableError: If RPC fails while polling.
        Side Effects:
            Polls RPC node.
        """
        ...

    def find_receipt(self, *, tx_hash: str) -> TransactionReceipt | None:
        """
        Return receipt if transaction has been mined, without waiting.

        Args:
            tx_hash: Broadcast hash.
        Returns:
            TransactionReceipt | None: Mined outcome or `None` when still pending/unknown.
        Assumptions:
            Used by reconciliation.
        Raises:
            ChainUnavailableError: If RPC fails.
        Side Effects:
            One RPC call.
        """
        ...
