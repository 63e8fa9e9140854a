from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Callable, TypeVar
from uuid import UUID, uuid4

from tradebot.contexts.execution.application.ports import (
    BroadcastOutcomeUnknownError,
    ChainUnavailableError,
    EvmChainGateway,
    MalformedQuoteError,
    ReceiptTimeoutError,
    SwapQuoteSource,
    TokenPriceSource,
    TradeAttemptRepository,
    TradeRecorder,
    TradeSigner,
    TradeSignerResolver,
)
from tradebot.contexts.execution.application.services import (
    AllowanceManager,
    PerUserTradeLock,
    TradeExecutionHooks,
)
from tradebot.contexts.execution.application.use_cases.trade_errors import (
    AmountTooSmallError,
    ConfirmationUnknownError,
    InvalidTradeRequestError,
    TradeAttemptConflictError,
    TradeRecordingPendingError,
    TransactionFailedError,
)
from tradebot.contexts.execution.application.use_cases.trade_models import (
    BuyTradeResult,
    SellTradeResult,
)
from tradebot.contexts.execution.domain.entities import (
    PLACEHOLDER_SYMBOL,
    AssetDescription,
    SwapQuote,
    TradeAttempt,
)
from tradebot.contexts.execution.domain.value_objects import (
    NATIVE_ASSET_SENTINEL,
    TradeAttemptStatus,
    TradeSide,
)
from tradebot.platform.errors import TradeBotError
from tradebot.platform.time import Clock
from tradebot.shared_kernel.primitives import (
    NATIVE_DECIMALS,
    EvmAddress,
    UserId,
    from_raw_units,
    to_raw_units,
)

log = logging.getLogger(__name__)

_ResultT = TypeVar("_ResultT")
_MAX_SYMBOL_LENGTH = 64
_ASSET_READ_WORKERS = 8


class ExecuteTradeUseCase:
    """
    ExecuteTradeUseCase — run one buy or sell from signer resolution to ledger recording.

    Pipeline: resolve signer, describe asset (decimals, symbol, price read concurrently),
    normalize amount, quote, stage attempt, ensure allowance (sell only), broadcast, wait for
    receipt, record. A ledger row is written only after a successful receipt; every failure
    propagates as a typed error and leaves the staged attempt in `failed` or `unknown`.

    Related:
      - src/tradebot/contexts/execution/application/services/allowance_manager.py
      - src/tradebot/contexts/execution/application/ports/evm_chain_gateway.py
      - src/tradebot/contexts/execution/application/use_cases/reconcile_trade_attempts.py
      - tests/unit/contexts/execution/application/test_execute_trade.py
    """

    def __init__(
        self,
        *,
        signer_resolver: TradeSignerResolver,
        quote_source: SwapQuoteSource,
        price_source: TokenPriceSource,
        chain: EvmChainGateway,
        allowance_manager: AllowanceManager,
        recorder: TradeRecorder,
        attempts: TradeAttemptRepository,
        clock: Clock,
        receipt_timeout_s: float,
        trade_lock: PerUserTradeLock | None = None,
        executor: ThreadPoolExecutor | None = None,
        hooks: TradeExecutionHooks | None = None,
        attempt_id_factory: Callable[[], UUID] = uuid4,
    ) -> None:
        """
        Initialize trade pipeline dependencies.

        Args:
            signer_resolver: Custody ACL port.
            quote_source: Aggregator quote port.
            price_source: Best-effort USD price port.
            chain: Chain gateway port.
            allowance_manager: Sell-side allowance service.
            recorder: Ledger ACL port.
            attempts: Staging storage port.
            clock: UTC clock.
            receipt_timeout_s: Swap receipt wait budget.
            trade_lock: Per-user in-flight guard; a private one is created when omitted.
            executor: Thread pool for concurrent asset reads; created when omitted.
            hooks: Optional metrics callbacks.
            attempt_id_factory: Attempt identifier generator.
        Returns:
            None.
        Assumptions:
            One instance is shared by all request threads of the process.
        Raises:
            ValueError: If a dependency is missing or timeout is not positive.
        Side Effects:
            May create a thread pool.
        """
        if signer_resolver is None:  # type: ignore[truthy-bool]
            raise ValueError("ExecuteTradeUseCase requires signer_resolver")
        if quote_source is None:  # type: ignore[truthy-bool]
            raise ValueError("ExecuteTradeUseCase requires quote_source")
        if price_source is None:  # type: ignore[truthy-bool]
            raise ValueError("ExecuteTradeUseCase requires price_source")
        if chain is None:  # type: ignore[truthy-bool]
            raise ValueError("ExecuteTradeUseCase requires chain")
        if allowance_manager is None:  # type: ignore[truthy-bool]
            raise ValueError("ExecuteTradeUseCase requires allowance_manager")
        if recorder is None:  # type: ignore[truthy-bool]
            raise ValueError("ExecuteTradeUseCase requires recorder")
        if attempts is None:  # type: ignore[truthy-bool]
            raise ValueError("ExecuteTradeUseCase requires attempts")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("ExecuteTradeUseCase requires clock")
        if receipt_timeout_s <= 0:
            raise ValueError("ExecuteTradeUseCase.receipt_timeout_s must be > 0")
        self._signer_resolver = signer_resolver
        self._quote_source = quote_source
        self._price_source = price_source
        self._chain = chain
        self._allowance_manager = allowance_manager
        self._recorder = recorder
        self._attempts = attempts
        self._clock = clock
        self._receipt_timeout_s = receipt_timeout_s
        self._trade_lock = trade_lock if trade_lock is not None else PerUserTradeLock()
        self._owns_executor = executor is None
        self._executor = (
            executor
            if executor is not None
            else ThreadPoolExecutor(
                max_workers=_ASSET_READ_WORKERS,
                thread_name_prefix="tradebot-asset-read",
            )
        )
        self._hooks = hooks if hooks is not None else TradeExecutionHooks()
        self._attempt_id_factory = attempt_id_factory

    def close(self) -> None:
        """
        Release the asset-read thread pool when it was created by this instance.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Called once on process shutdown.
        Raises:
            None.
        Side Effects:
            Shuts down owned thread pool.
        """
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    def execute_buy(
        self,
        *,
        user_id: UserId,
        token_address: str,
        eth_amount: Decimal,
    ) -> BuyTradeResult:
        """
        Spend `eth_amount` native ETH on `token_address`.

        Args:
            user_id: Trading user.
            token_address: ERC-20 to buy.
            eth_amount: Human ETH amount.
        Returns:
            BuyTradeResult: Confirmed and recorded outcome.
        Assumptions:
            ETH has 18 decimals, so the amount is normalized before any network call.
        Raises:
            InvalidTradeRequestError: If address or amount is malformed.
            AmountTooSmallError: If amount truncates to zero wei.
            TradeInProgressError: If user has another trade in flight.
            NoLiquidityError: If aggregator has no route.
            TransactionFailedError: If swap is mined with failure status.
            ConfirmationUnknownError: If receipt wait times out.
            TradeBotError: Other classified custody, quote, or chain failures.
        Side Effects:
            Broadcasts one transaction and writes staging and ledger rows.
        """
        token = _parse_token_address(token_address)
        sell_amount_raw = _normalize_amount(amount=eth_amount, decimals=NATIVE_DECIMALS)
        return self._instrumented(
            side=TradeSide.BUY,
            user_id=user_id,
            operation=lambda: self._buy(
                user_id=user_id,
                token=token,
                sell_amount_raw=sell_amount_raw,
            ),
        )

    def execute_sell(
        self,
        *,
        user_id: UserId,
        token_address: str,
        token_amount: Decimal,
    ) -> SellTradeResult:
        """
        Sell `token_amount` of `token_address` for native ETH.

        Args:
            user_id: Trading user.
            token_address: ERC-20 to sell.
            token_amount: Human token amount.
        Returns:
            SellTradeResult: Confirmed and recorded outcome.
        Assumptions:
            Amount is normalized right after the decimals read and before the quote.
        Raises:
            InvalidTradeRequestError: If address or amount is malformed.
            AmountTooSmallError: If amount is not positive or truncates to zero smallest units.
            TradeInProgressError: If user has another trade in flight.
            AllowanceApprovalError: If approval reverts or times out.
            NoLiquidityError: If aggregator has no route.
            TransactionFailedError: If swap is mined with failure status.
            ConfirmationUnknownError: If receipt wait times out.
            TradeBotError: Other classified custody, quote, or chain failures.
        Side Effects:
            May broadcast approval, broadcasts swap, writes staging and ledger rows.
        """
        token = _parse_token_address(token_address)
        _ensure_finite_amount(amount=token_amount)
        if token_amount <= 0:
            raise AmountTooSmallError()
        return self._instrumented(
            side=TradeSide.SELL,
            user_id=user_id,
            operation=lambda: self._sell(
                user_id=user_id,
                token=token,
                token_amount=token_amount,
            ),
        )

    def _buy(self, *, user_id: UserId, token: EvmAddress, sell_amount_raw: int) -> BuyTradeResult:
        signer = self._signer_resolver.resolve(user_id=user_id)
        asset = self._describe_asset(token_address=token)
        quote = self._quote_source.fetch_quote(
            sell_token=NATIVE_ASSET_SENTINEL,
            buy_token=str(token),
            sell_amount_raw=sell_amount_raw,
            taker=str(signer.address),
        )
        if quote.buy_amount <= 0:
            raise MalformedQuoteError(message="quote buyAmount must be > 0")
        tokens_received = from_raw_units(raw_amount=quote.buy_amount, decimals=asset.decimals)

        attempt = self._stage(
            user_id=user_id,
            side=TradeSide.BUY,
            asset=asset,
            sell_amount_raw=sell_amount_raw,
            ledger_amount=tokens_received,
        )
        submitted = self._submit(attempt=attempt, signer=signer, quote=quote)
        self._confirm_and_record(attempt=submitted)
        return BuyTradeResult(
            tx_hash=str(submitted.tx_hash),
            symbol=asset.symbol,
            tokens_received=tokens_received,
            eth_spent=from_raw_units(raw_amount=sell_amount_raw, decimals=NATIVE_DECIMALS),
            price_usd=asset.price_usd,
        )

    def _sell(
        self,
        *,
        user_id: UserId,
        token: EvmAddress,
        token_amount: Decimal,
    ) -> SellTradeResult:
        signer = self._signer_resolver.resolve(user_id=user_id)
        asset = self._describe_asset(token_address=token)
        amount_raw = _normalize_amount(amount=token_amount, decimals=asset.decimals)
        quote = self._quote_source.fetch_quote(
            sell_token=str(token),
            buy_token=NATIVE_ASSET_SENTINEL,
            sell_amount_raw=amount_raw,
            taker=str(signer.address),
        )
        tokens_sold = from_raw_units(raw_amount=amount_raw, decimals=asset.decimals)

        attempt = self._stage(
            user_id=user_id,
            side=TradeSide.SELL,
            asset=asset,
            sell_amount_raw=amount_raw,
            ledger_amount=tokens_sold,
        )
        if quote.allowance_target is not None:
            try:
                self._allowance_manager.ensure_allowance(
                    signer=signer,
                    token_address=token,
                    spender=quote.allowance_target,
                    required_amount=(
                        quote.sell_amount if quote.sell_amount is not None else amount_raw
                    ),
                )
            except Exception:
                self._advance(attempt=attempt, status=TradeAttemptStatus.FAILED)
                raise
        submitted = self._submit(attempt=attempt, signer=signer, quote=quote)
        self._confirm_and_record(attempt=submitted)
        return SellTradeResult(
            tx_hash=str(submitted.tx_hash),
            symbol=asset.symbol,
            tokens_sold=tokens_sold,
            eth_received=from_raw_units(raw_amount=quote.buy_amount, decimals=NATIVE_DECIMALS),
            price_usd=asset.price_usd,
        )

    def _instrumented(
        self,
        *,
        side: TradeSide,
        user_id: UserId,
        operation: Callable[[], _ResultT],
    ) -> _ResultT:
        """
        Run trade body under the per-user lock and emit outcome hooks.

        Args:
            side: Trade side label for hooks and logs.
            user_id: Trading user.
            operation: Trade body.
        Returns:
            _ResultT: Trade body result.
        Assumptions:
            Hooks are lightweight counter updates.
        Raises:
            Exception: Any error raised by the body, unchanged.
        Side Effects:
            Holds user's trade slot while the body runs.
        """
        started = time.monotonic()
        try:
            with self._trade_lock.hold(user_id=user_id):
                result = operation()
        except TradeBotError as error:
            self._emit_failed(side=side, code=error.code)
            log.warning(
                "execution trade failed side=%s user_id=%s code=%s",
                side.value,
                user_id,
                error.code,
            )
            raise
        except Exception:
            self._emit_failed(side=side, code="unexpected")
            raise
        finally:
            if self._hooks.on_trade_duration is not None:
                self._hooks.on_trade_duration(side.value, time.monotonic() - started)

        if self._hooks.on_trade_succeeded is not None:
            self._hooks.on_trade_succeeded(side.value)
        return result

    def _emit_failed(self, *, side: TradeSide, code: str) -> None:
        if self._hooks.on_trade_failed is not None:
            self._hooks.on_trade_failed(side.value, code)

    def _describe_asset(self, *, token_address: EvmAddress) -> AssetDescription:
        """
        Read decimals, symbol, and USD price concurrently.

        Args:
            token_address: ERC-20 contract.
        Returns:
            AssetDescription: Asset facts for normalization and recording.
        Assumptions:
            Only the decimals read is authoritative.
        Raises:
            ChainUnavailableError: If decimals cannot be read.
        Side Effects:
            Up to three concurrent outbound calls.
        """
        decimals_future = self._executor.submit(
            self._chain.read_decimals,
            token_address=token_address,
        )
        symbol_future = self._executor.submit(self._read_symbol, token_address)
        price_future = self._executor.submit(
            self._price_source.find_price_usd,
            token_address=token_address,
        )
        decimals = decimals_future.result()
        return AssetDescription(
            token_address=token_address,
            decimals=decimals,
            symbol=symbol_future.result(),
            price_usd=price_future.result(),
        )

    def _read_symbol(self, token_address: EvmAddress) -> str:
        try:
            symbol = self._chain.read_symbol(token_address=token_address).strip()
        except ChainUnavailableError:
            log.warning("execution token symbol unavailable token=%s", token_address)
            return PLACEHOLDER_SYMBOL
        if not symbol or len(symbol) > _MAX_SYMBOL_LENGTH:
            return PLACEHOLDER_SYMBOL
        return symbol

    def _stage(
        self,
        *,
        user_id: UserId,
        side: TradeSide,
        asset: AssetDescription,
        sell_amount_raw: int,
        ledger_amount: Decimal,
    ) -> TradeAttempt:
        now = self._clock.now()
        attempt = TradeAttempt(
            attempt_id=self._attempt_id_factory(),
            user_id=user_id,
            side=side,
            token_address=asset.token_address,
            sell_amount_raw=sell_amount_raw,
            status=TradeAttemptStatus.PENDING,
            tx_hash=None,
            symbol=asset.symbol,
            ledger_amount=ledger_amount,
            price_usd=asset.price_usd,
            created_at=now,
            updated_at=now,
        )
        self._attempts.create(attempt=attempt)
        return attempt

    def _submit(
        self,
        *,
        attempt: TradeAttempt,
        signer: TradeSigner,
        quote: SwapQuote,
    ) -> TradeAttempt:
        """
        Broadcast the quoted swap and move the attempt to `submitted`.

        Args:
            attempt: Pending attempt.
            signer: Signing material.
            quote: Fresh quote with executable payload.
        Returns:
            TradeAttempt: Submitted snapshot carrying the broadcast hash.
        Assumptions:
            Errors raised before the signed payload leaves the process mean nothing was sent.
        Raises:
            ConfirmationUnknownError: If transport failed after signing; attempt is `unknown`.
            TradeBotError: Classified chain errors; attempt is `failed`.
        Side Effects:
            Broadcasts one transaction and updates the staging row.
        """
        try:
            tx_hash = self._chain.send_transaction(
                signer=signer,
                to=quote.to,
                data=quote.data,
                value=quote.value,
            )
        except BroadcastOutcomeUnknownError as error:
            submitted = self._advance(
                attempt=attempt,
                status=TradeAttemptStatus.SUBMITTED,
                tx_hash=error.tx_hash,
            )
            self._advance(attempt=submitted, status=TradeAttemptStatus.UNKNOWN)
            log.warning(
                "execution swap broadcast unknown attempt_id=%s tx_hash=%s",
                attempt.attempt_id,
                error.tx_hash,
            )
            raise ConfirmationUnknownError(tx_hash=error.tx_hash) from error
        except Exception:
            self._advance(attempt=attempt, status=TradeAttemptStatus.FAILED)
            raise
        log.info(
            "execution swap submitted side=%s user_id=%s attempt_id=%s tx_hash=%s",
            attempt.side.value,
            attempt.user_id,
            attempt.attempt_id,
            tx_hash,
        )
        return self._advance(
            attempt=attempt,
            status=TradeAttemptStatus.SUBMITTED,
            tx_hash=tx_hash,
        )

    def _confirm_and_record(self, *, attempt: TradeAttempt) -> None:
        """
        Wait for swap receipt and record the ledger row on success.

        Args:
            attempt: Submitted attempt.
        Returns:
            None.
        Assumptions:
            `attempt.ledger_amount` was fixed at staging time.
        Raises:
            ConfirmationUnknownError: If receipt is not available within the timeout.
            TransactionFailedError: If receipt reports failure.
            TradeRecordingPendingError: If the ledger write fails after confirmation.
        Side Effects:
            Polls chain, updates staging row, writes one ledger row on success.
        """
        tx_hash = str(attempt.tx_hash)
        try:
            receipt = self._chain.wait_for_receipt(
                tx_hash=tx_hash,
                timeout_s=self._receipt_timeout_s,
            )
        except (ReceiptTimeoutError, ChainUnavailableError) as error:
            self._advance(attempt=attempt, status=TradeAttemptStatus.UNKNOWN)
            log.warning(
                "execution swap confirmation unknown attempt_id=%s tx_hash=%s reason=%s",
                attempt.attempt_id,
                tx_hash,
                error,
            )
            raise ConfirmationUnknownError(tx_hash=tx_hash) from error

        if not receipt.succeeded:
            self._advance(attempt=attempt, status=TradeAttemptStatus.FAILED)
            raise TransactionFailedError(tx_hash=tx_hash)

        confirmed = self._advance(attempt=attempt, status=TradeAttemptStatus.CONFIRMED)
        record_confirmed_attempt(
            attempt=confirmed,
            recorder=self._recorder,
            attempts=self._attempts,
            clock=self._clock,
        )

    def _advance(
        self,
        *,
        attempt: TradeAttempt,
        status: TradeAttemptStatus,
        tx_hash: str | None = None,
    ) -> TradeAttempt:
        return advance_attempt(
            attempt=attempt,
            status=status,
            attempts=self._attempts,
            clock=self._clock,
            tx_hash=tx_hash,
        )


def advance_attempt(
    *,
    attempt: TradeAttempt,
    status: TradeAttemptStatus,
    attempts: TradeAttemptRepository,
    clock: Clock,
    tx_hash: str | None = None,
) -> TradeAttempt:
    """
    Move attempt to `status` and persist it with compare-and-set on the previous status.

    Args:
        attempt: Current snapshot.
        status: Target status.
        attempts: Staging storage port.
        clock: UTC clock.
        tx_hash: Optional broadcast hash.
    Returns:
        TradeAttempt: Updated snapshot.
    Assumptions:
        A lost compare-and-set means another writer moved the row first.
    Raises:
        ValueError: If transition is not allowed.
        TradeAttemptConflictError: If the stored status no longer matches `attempt.status`.
    Side Effects:
        Updates one staging row.
    """
    updated = attempt.transition(status=status, changed_at=clock.now(), tx_hash=tx_hash)
    if not attempts.save(attempt=updated, expected_status=attempt.status):
        log.warning(
            "execution trade attempt changed concurrently attempt_id=%s expected=%s target=%s",
            attempt.attempt_id,
            attempt.status.value,
            status.value,
        )
        raise TradeAttemptConflictError(
            attempt_id=str(attempt.attempt_id),
            expected_status=attempt.status.value,
        )
    return updated


def record_confirmed_attempt(
    *,
    attempt: TradeAttempt,
    recorder: TradeRecorder,
    attempts: TradeAttemptRepository,
    clock: Clock,
) -> TradeAttempt:
    """
    Write the ledger row of a confirmed attempt and mark it `recorded`.

    Args:
        attempt: Attempt in `confirmed` status.
        recorder: Ledger ACL port.
        attempts: Staging storage port.
        clock: UTC clock.
    Returns:
        TradeAttempt: Recorded snapshot.
    Assumptions:
        Shared by the executor and reconciliation. The ledger row is keyed by `attempt_id`,
        so a second writer holding the same confirmed snapshot inserts nothing.
    Raises:
        TradeRecordingPendingError: If the ledger write fails; attempt stays `confirmed`.
        TradeAttemptConflictError: If another writer already marked the attempt `recorded`.
    Side Effects:
        Writes one ledger row and updates one staging row.
    """
    tx_hash = str(attempt.tx_hash)
    if attempt.ledger_amount is None:
        raise TradeRecordingPendingError(tx_hash=tx_hash)
    try:
        recorder.record(
            record_id=attempt.attempt_id,
            user_id=attempt.user_id,
            side=attempt.side,
            symbol=attempt.symbol,
            amount=attempt.ledger_amount,
            price_usd=attempt.price_usd,
        )
    except Exception as error:
        log.exception(
            "execution ledger write failed attempt_id=%s tx_hash=%s",
            attempt.attempt_id,
            tx_hash,
        )
        raise TradeRecordingPendingError(tx_hash=tx_hash) from error
    return advance_attempt(
        attempt=attempt,
        status=TradeAttemptStatus.RECORDED,
        attempts=attempts,
        clock=clock,
    )


def _parse_token_address(raw_value: str) -> EvmAddress:
    """
    Validate ERC-20 address input.

    Args:
        raw_value: User-provided address.
    Returns:
        EvmAddress: Canonical address.
    Assumptions:
        Native sentinel is not a tradable token on either side.
    Raises:
        InvalidTradeRequestError: If address is malformed or is the native sentinel.
    Side Effects:
        None.
    """
    try:
        address = EvmAddress(raw_value)
    except ValueError as error:
        raise InvalidTradeRequestError(
            message="Invalid token address. Please provide a valid 0x address.",
        ) from error
    if str(address) == NATIVE_ASSET_SENTINEL.lower():
        raise InvalidTradeRequestError(message="Token address must be an ERC-20 contract.")
    return address


def _ensure_finite_amount(*, amount: Decimal) -> None:
    if not isinstance(amount, Decimal) or not amount.is_finite():
        raise InvalidTradeRequestError(message="Amount must be a finite number.")


def _normalize_amount(*, amount: Decimal, decimals: int) -> int:
    """
    Convert human amount to smallest units and reject non-positive results.

    Args:
        amount: Human amount.
        decimals: Asset decimals.
    Returns:
        int: Positive raw amount.
    Assumptions:
        Sub-unit dust is truncated.
    Raises:
        InvalidTradeRequestError: If amount is not finite or decimals are unsupported.
        AmountTooSmallError: If raw amount is `<= 0`.
    Side Effects:
        None.
    """
    _ensure_finite_amount(amount=amount)
    try:
        raw_amount = to_raw_units(amount=amount, decimals=decimals)
    except ValueError as error:
        raise InvalidTradeRequestError(
            message=f"Unsupported token decimals: {decimals}.",
        ) from error
    if raw_amount <= 0:
        raise AmountTooSmallError()
    return raw_amount
