from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from tradebot.contexts.execution.application.ports import (
    EvmChainGateway,
    TradeAttemptRepository,
    TradeRecorder,
)
from tradebot.contexts.execution.application.services import TradeExecutionHooks
from tradebot.contexts.execution.application.use_cases.execute_trade import (
    advance_attempt,
    record_confirmed_attempt,
)
from tradebot.contexts.execution.application.use_cases.trade_errors import (
    TradeAttemptConflictError,
)
from tradebot.contexts.execution.domain.entities import TradeAttempt
from tradebot.contexts.execution.domain.value_objects import TradeAttemptStatus
from tradebot.platform.errors import TradeBotError
from tradebot.platform.time import Clock

log = logging.getLogger(__name__)

_RECONCILABLE_STATUSES = (
    TradeAttemptStatus.PENDING,
    TradeAttemptStatus.SUBMITTED,
    TradeAttemptStatus.UNKNOWN,
    TradeAttemptStatus.CONFIRMED,
)


@dataclass(frozen=True, slots=True)
class ReconciliationReport:
    """
    ReconciliationReport — counters of one reconciliation pass.

    `skipped` counts attempts another writer moved between the listing and the update.
    """

    scanned: int
    recorded: int
    failed: int
    unresolved: int
    abandoned: int
    skipped: int
    errors: int


class ReconcileTradeAttemptsUseCase:
    """
    ReconcileTradeAttemptsUseCase — settle trades whose outcome was not known when they ran.

    Attempts left `submitted` or `unknown` are re-checked against the chain; confirmed ones
    get their ledger row exactly once and move to `recorded`, reverted ones move to `failed`.
    Attempts idle in `pending` never reached broadcast bookkeeping and are closed as `failed`.

    Related:
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
      - src/tradebot/contexts/execution/application/ports/trade_attempt_repository.py
      - apps/worker/trade_reconciler/main/main.py
    """

    def __init__(
        self,
        *,
        attempts: TradeAttemptRepository,
        chain: EvmChainGateway,
        recorder: TradeRecorder,
        clock: Clock,
        stale_after_s: float,
        batch_size: int = 100,
        hooks: TradeExecutionHooks | None = None,
    ) -> None:
        """
        Initialize reconciliation dependencies.

        Args:
            attempts: Staging storage port.
            chain: Chain gateway port.
            recorder: Ledger ACL port.
            clock: UTC clock.
            stale_after_s: Minimum idle age before an attempt is touched.
            batch_size: Maximum attempts per pass.
            hooks: Optional metrics callbacks.
        Returns:
            None.
        Assumptions:
            `stale_after_s` exceeds the executor receipt timeout so live trades are never
            reconciled concurrently.
        Raises:
            ValueError: If a dependency is missing or numeric settings are not positive.
        Side Effects:
            None.
        """
        if attempts is None:  # type: ignore[truthy-bool]
            raise ValueError("ReconcileTradeAttemptsUseCase requires attempts")
        if chain is None:  # type: ignore[truthy-bool]
            raise ValueError("ReconcileTradeAttemptsUseCase requires chain")
        if recorder is None:  # type: ignore[truthy-bool]
            raise ValueError("ReconcileTradeAttemptsUseCase requires recorder")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("ReconcileTradeAttemptsUseCase requires clock")
        if stale_after_s <= 0:
            raise ValueError("ReconcileTradeAttemptsUseCase.stale_after_s must be > 0")
        if batch_size <= 0:
            raise ValueError("ReconcileTradeAttemptsUseCase.batch_size must be > 0")
        self._attempts = attempts
        self._chain = chain
        self._recorder = recorder
        self._clock = clock
        self._stale_after = timedelta(seconds=stale_after_s)
        self._batch_size = batch_size
        self._hooks = hooks if hooks is not None else TradeExecutionHooks()

    def reconcile_once(self) -> ReconciliationReport:
        """
        Run one pass over idle unsettled attempts.

        Args:
            None.
        Returns:
            ReconciliationReport: Pass counters.
        Assumptions:
            Classified per-attempt failures are logged and retried on the next pass. Concurrent
            passes are safe: every update is a compare-and-set and the ledger row is keyed by
            attempt id.
        Raises:
            Exception: Unclassified storage errors.
        Side Effects:
            Chain reads, staging updates, and ledger writes.
        """
        cutoff = self._clock.now() - self._stale_after
        rows = self._attempts.list_by_status(
            statuses=_RECONCILABLE_STATUSES,
            limit=self._batch_size,
        )
        idle = [row for row in rows if row.updated_at <= cutoff]

        recorded = failed = unresolved = abandoned = skipped = errors = 0
        for attempt in idle:
            try:
                if attempt.status is TradeAttemptStatus.PENDING:
                    self._abandon(attempt=attempt)
                    abandoned += 1
                    continue
                outcome = self._settle(attempt=attempt)
            except TradeAttemptConflictError:
                skipped += 1
                log.info(
                    "reconciler attempt moved by another writer attempt_id=%s status=%s",
                    attempt.attempt_id,
                    attempt.status.value,
                )
                continue
            except TradeBotError as error:
                errors += 1
                log.warning(
                    "reconciler attempt not settled attempt_id=%s code=%s message=%s",
                    attempt.attempt_id,
                    error.code,
                    error.message,
                )
                continue
            if outcome is TradeAttemptStatus.RECORDED:
                recorded += 1
            elif outcome is TradeAttemptStatus.FAILED:
                failed += 1
            else:
                unresolved += 1
            if outcome.is_terminal and self._hooks.on_attempt_settled is not None:
                self._hooks.on_attempt_settled(outcome.value)

        report = ReconciliationReport(
            scanned=len(idle),
            recorded=recorded,
            failed=failed,
            unresolved=unresolved,
            abandoned=abandoned,
            skipped=skipped,
            errors=errors,
        )
        if idle:
            log.info(
                "reconciler pass finished scanned=%s recorded=%s failed=%s unresolved=%s "
                "abandoned=%s skipped=%s errors=%s",
                report.scanned,
                report.recorded,
                report.failed,
                report.unresolved,
                report.abandoned,
                report.skipped,
                report.errors,
            )
        return report

    def _abandon(self, *, attempt: TradeAttempt) -> None:
        self._advance(attempt=attempt, status=TradeAttemptStatus.FAILED)
        log.warning(
            "reconciler abandoned pending attempt attempt_id=%s user_id=%s created_at=%s",
            attempt.attempt_id,
            attempt.user_id,
            attempt.created_at.isoformat(),
        )

    def _settle(self, *, attempt: TradeAttempt) -> TradeAttemptStatus:
        """
        Drive one attempt as far as chain state allows.

        Args:
            attempt: Attempt in `submitted`, `unknown`, or `confirmed` status.
        Returns:
            TradeAttemptStatus: Status after this pass.
        Assumptions:
            Missing receipt means the transaction is still pending or was dropped.
        Raises:
            ChainUnavailableError: If receipt lookup fails.
            TradeRecordingPendingError: If the ledger write fails.
            TradeAttemptConflictError: If another writer moved the attempt first.
        Side Effects:
            Chain read, staging updates, and at most one ledger write.
        """
        current = attempt
        if current.status in (TradeAttemptStatus.SUBMITTED, TradeAttemptStatus.UNKNOWN):
            receipt = self._chain.find_receipt(tx_hash=str(current.tx_hash))
            if receipt is None:
                if current.status is TradeAttemptStatus.SUBMITTED:
                    current = self._advance(attempt=current, status=TradeAttemptStatus.UNKNOWN)
                return current.status
            if not receipt.succeeded:
                log.info(
                    "reconciler attempt reverted attempt_id=%s tx_hash=%s",
                    current.attempt_id,
                    current.tx_hash,
                )
                return self._advance(attempt=current, status=TradeAttemptStatus.FAILED).status
            current = self._advance(attempt=current, status=TradeAttemptStatus.CONFIRMED)

        recorded = record_confirmed_attempt(
            attempt=current,
            recorder=self._recorder,
            attempts=self._attempts,
            clock=self._clock,
        )
        log.info(
            "reconciler attempt recorded attempt_id=%s tx_hash=%s",
            recorded.attempt_id,
            recorded.tx_hash,
        )
        return recorded.status

    def _advance(self, *, attempt: TradeAttempt, status: TradeAttemptStatus) -> TradeAttempt:
        return advance_attempt(
            attempt=attempt,
            status=status,
            attempts=self._attempts,
            clock=self._clock,
        )
