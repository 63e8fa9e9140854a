from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

import requests
from eth_account import Account
from web3 import Web3
from web3.exceptions import (
    ContractLogicError,
    TimeExhausted,
    TransactionNotFound,
    Web3Exception,
)

from tradebot.contexts.execution.application.ports import (
    BroadcastOutcomeUnknownError,
    ChainUnavailableError,
    EvmChainGateway,
    InsufficientFundsError,
    ReceiptTimeoutError,
    TradeSigner,
    TransactionReceipt,
    TransactionSimulationFailedError,
)
from tradebot.platform.errors import TradeBotError
from tradebot.shared_kernel.primitives import EvmAddress

log = logging.getLogger(__name__)

_ERC20_ABI: tuple[Mapping[str, Any], ...] = (
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
)

_CHAIN_ERRORS = (Web3Exception, requests.RequestException, ValueError)
_TRANSPORT_ERRORS = (requests.RequestException, TimeoutError)


@dataclass(frozen=True, slots=True)
class Web3EvmChainGatewayConfig:
    """
    Web3EvmChainGatewayConfig — JSON-RPC endpoint and chain id of the trading chain.
    """

    rpc_url: str
    chain_id: int
    request_timeout_s: float

    def __post_init__(self) -> None:
        normalized_url = self.rpc_url.strip()
        if not normalized_url.startswith(("https://", "http://")):
            raise ValueError(
                "Web3EvmChainGatewayConfig.rpc_url must start with http:// or https://"
            )
        if self.chain_id <= 0:
            raise ValueError("Web3EvmChainGatewayConfig.chain_id must be > 0")
        if self.request_timeout_s <= 0:
            raise ValueError("Web3EvmChainGatewayConfig.request_timeout_s must be > 0")
        object.__setattr__(self, "rpc_url", normalized_url)

    def __repr__(self) -> str:
        return (
            "Web3EvmChainGatewayConfig("
            f"rpc_url=<redacted>, chain_id={self.chain_id}, "
            f"request_timeout_s={self.request_timeout_s})"
        )


class Web3EvmChainGateway(EvmChainGateway):
    """
    Web3EvmChainGateway — web3.py adapter signing locally and broadcasting raw transactions.

    Nonce is read as `pending` count on every send; concurrent sends for one address are
    prevented upstream by the per-user trade lock.

    Related:
      - src/tradebot/contexts/execution/application/ports/evm_chain_gateway.py
      - src/tradebot/contexts/execution/application/services/allowance_manager.py
      - src/tradebot/contexts/execution/application/use_cases/reconcile_trade_attempts.py
    """

    def __init__(self, *, config: Web3EvmChainGatewayConfig, web3: Web3 | None = None) -> None:
        """
        Initialize gateway with HTTP provider or injected web3 instance.

        Args:
            config: Validated chain config.
            web3: Optional preconfigured `Web3` instance for tests.
        Returns:
            None.
        Assumptions:
            RPC URL may embed a provider API key and is never logged.
        Raises:
            ValueError: If config is missing.
        Side Effects:
            Creates HTTP provider when no instance is injected.
        """
        if config is None:  # type: ignore[truthy-bool]
            raise ValueError("Web3EvmChainGateway requires config")
        self._config = config
        self._web3 = (
            web3
            if web3 is not None
            else Web3(
                Web3.HTTPProvider(
                    config.rpc_url,
                    request_kwargs={"timeout": config.request_timeout_s},
                )
            )
        )

    def read_decimals(self, *, token_address: EvmAddress) -> int:
        try:
            return int(self._erc20(token_address).functions.decimals().call())
        except _CHAIN_ERRORS as error:
            raise ChainUnavailableError(
                message=f"decimals() failed token={token_address}: {error}",
            ) from error

    def read_symbol(self, *, token_address: EvmAddress) -> str:
        try:
            return str(self._erc20(token_address).functions.symbol().call())
        except _CHAIN_ERRORS as error:
            raise ChainUnavailableError(
                message=f"symbol() failed token={token_address}: {error}",
            ) from error

    def read_allowance(
        self,
        *,
        token_address: EvmAddress,
        owner: EvmAddress,
        spender: EvmAddress,
    ) -> int:
        try:
            raw_allowance = (
                self._erc20(token_address)
                .functions.allowance(
                    Web3.to_checksum_address(str(owner)),
                    Web3.to_checksum_address(str(spender)),
                )
                .call()
            )
        except _CHAIN_ERRORS as error:
            raise ChainUnavailableError(
                message=f"allowance() failed token={token_address}: {error}",
            ) from error
        return int(raw_allowance)

    def send_transaction(
        self,
        *,
        signer: TradeSigner,
        to: EvmAddress,
        data: str,
        value: int,
    ) -> str:
        """
        Estimate gas, sign, and broadcast one contract call.

        Args:
            signer: Signing material.
            to: Target contract.
            data: `0x`-prefixed calldata.
            value: Native value in wei.
        Returns:
            str: `0x`-prefixed transaction hash.
        Assumptions:
            Legacy `gasPrice` pricing is accepted by the chain.
        Raises:
            InsufficientFundsError: If node reports the sender cannot pay value plus gas.
            TransactionSimulationFailedError: If gas estimation reverts.
            BroadcastOutcomeUnknownError: If transport fails while the signed payload is sent.
            ChainUnavailableError: If any other RPC step fails.
        Side Effects:
            Broadcasts one transaction.
        """
        transaction = {
            "from": Web3.to_checksum_address(str(signer.address)),
            "to": Web3.to_checksum_address(str(to)),
            "data": data,
            "value": value,
        }
        return self._sign_and_send(signer=signer, transaction=transaction, label="swap")

    def send_approval(
        self,
        *,
        signer: TradeSigner,
        token_address: EvmAddress,
        spender: EvmAddress,
        amount: int,
    ) -> str:
        try:
            transaction = (
                self._erc20(token_address)
                .functions.approve(Web3.to_checksum_address(str(spender)), amount)
                .build_transaction(
                    {
                        "from": Web3.to_checksum_address(str(signer.address)),
                        "chainId": self._config.chain_id,
                    }
                )
            )
        except _CHAIN_ERRORS as error:
            raise _classify_chain_error(error=error, label="approve") from error
        return self._sign_and_send(signer=signer, transaction=dict(transaction), label="approve")

    def wait_for_receipt(self, *, tx_hash: str, timeout_s: float) -> TransactionReceipt:
        try:
            receipt = self._web3.eth.wait_for_transaction_receipt(
                tx_hash,  # type: ignore[arg-type]
                timeout=timeout_s,
            )
        except TimeExhausted as error:
            raise ReceiptTimeoutError(tx_hash=tx_hash, timeout_s=timeout_s) from error
        except _CHAIN_ERRORS as error:
            raise ChainUnavailableError(
                message=f"receipt wait failed tx_hash={tx_hash}: {error}",
            ) from error
        return _map_receipt(tx_hash=tx_hash, receipt=receipt)

    def find_receipt(self, *, tx_hash: str) -> TransactionReceipt | None:
        try:
            receipt = self._web3.eth.get_transaction_receipt(tx_hash)  # type: ignore[arg-type]
        except TransactionNotFound:
            return None
        except _CHAIN_ERRORS as error:
            raise ChainUnavailableError(
                message=f"receipt lookup failed tx_hash={tx_hash}: {error}",
            ) from error
        return _map_receipt(tx_hash=tx_hash, receipt=receipt)

    def _erc20(self, token_address: EvmAddress) -> Any:
        return self._web3.eth.contract(
            address=Web3.to_checksum_address(str(token_address)),
            abi=list(_ERC20_ABI),
        )

    def _sign_and_send(
        self,
        *,
        signer: TradeSigner,
        transaction: dict[str, Any],
        label: str,
    ) -> str:
        """
        Fill nonce/gas/fee fields, sign locally, and broadcast.

        Args:
            signer: Signing material.
            transaction: Partially built transaction dict.
            label: Log label (`swap` or `approve`).
        Returns:
            str: `0x`-prefixed hash of the signed transaction.
        Assumptions:
            Private key never leaves the process. The hash is known before the payload is sent.
        Raises:
            InsufficientFundsError: If node reports the sender cannot pay value plus gas.
            TransactionSimulationFailedError: If gas estimation reverts.
            BroadcastOutcomeUnknownError: If transport fails while the signed payload is sent.
            ChainUnavailableError: If any other RPC step or signing fails.
        Side Effects:
            Broadcasts one transaction.
        """
        eth = self._web3.eth
        sender = transaction["from"]
        try:
            transaction["chainId"] = self._config.chain_id
            transaction["nonce"] = eth.get_transaction_count(sender, "pending")
            transaction.setdefault("gas", eth.estimate_gas(transaction))  # type: ignore[arg-type]
            transaction.setdefault("gasPrice", eth.gas_price)
            transaction.pop("maxFeePerGas", None)
            transaction.pop("maxPriorityFeePerGas", None)
            signed = Account.from_key(signer.private_key_hex).sign_transaction(transaction)
        except _CHAIN_ERRORS as error:
            raise _classify_chain_error(error=error, label=label) from error

        tx_hash = Web3.to_hex(signed.hash)
        try:
            eth.send_raw_transaction(signed.raw_transaction)
        except _TRANSPORT_ERRORS as error:
            log.warning(
                "chain transaction broadcast outcome unknown kind=%s tx_hash=%s reason=%s",
                label,
                tx_hash,
                error,
            )
            raise BroadcastOutcomeUnknownError(
                message=f"{label} broadcast outcome unknown tx_hash={tx_hash}: {error}",
                tx_hash=tx_hash,
            ) from error
        except _CHAIN_ERRORS as error:
            if "already known" not in str(error).lower():
                raise _classify_chain_error(error=error, label=label) from error
            log.info("chain transaction already in mempool kind=%s tx_hash=%s", label, tx_hash)

        log.info(
            "chain transaction broadcast kind=%s tx_hash=%s nonce=%s",
            label,
            tx_hash,
            transaction["nonce"],
        )
        return tx_hash


def _classify_chain_error(*, error: Exception, label: str) -> TradeBotError:
    """
    Map node rejection of a transaction to trade or network error.

    Args:
        error: Raised web3, transport, or signing error.
        label: Log label (`swap` or `approve`).
    Returns:
        TradeBotError: Funds, simulation, or chain-unavailable error.
    Assumptions:
        Node error text carries `insufficient funds` or `execution reverted` for those cases.
    Raises:
        None.
    Side Effects:
        None.
    """
    detail = str(error)
    lowered = detail.lower()
    if "insufficient funds" in lowered:
        return InsufficientFundsError(message=f"{label} rejected for insufficient funds: {detail}")
    if isinstance(error, ContractLogicError) or "execution reverted" in lowered:
        return TransactionSimulationFailedError(
            message=f"{label} reverted during gas estimation: {detail}",
        )
    return ChainUnavailableError(message=f"{label} broadcast failed: {detail}")


def _map_receipt(*, tx_hash: str, receipt: Mapping[str, Any]) -> TransactionReceipt:
    status = receipt.get("status")
    block_number = receipt.get("blockNumber")
    return TransactionReceipt(
        tx_hash=tx_hash,
        succeeded=status is not None and int(status) == 1,
        block_number=int(block_number) if block_number is not None else None,
    )
