from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from prometheus_client import Counter, Histogram, start_http_server

from tradebot.contexts.execution.adapters.outbound.acl.ledger import LedgerTradeRecorder
from tradebot.contexts.execution.adapters.outbound.chain import (
    Web3EvmChainGateway,
    Web3EvmChainGatewayConfig,
)
from tradebot.contexts.execution.adapters.outbound.config import (
    load_trade_execution_runtime_config,
)
from tradebot.contexts.execution.adapters.outbound.persistence.postgres import (
    PostgresTradeAttemptRepository,
)
from tradebot.contexts.execution.application.services import TradeExecutionHooks
from tradebot.contexts.execution.application.use_cases import (
    ReconcileTradeAttemptsUseCase,
    ReconciliationReport,
)
from tradebot.contexts.ledger.adapters.outbound.persistence.postgres import (
    PostgresTradeLedgerRepository,
)
from tradebot.contexts.ledger.application.use_cases import RecordTradeUseCase
from tradebot.platform.config import resolve_tradebot_runtime_settings
from tradebot.platform.persistence.postgres import PsycopgPostgresGateway
from tradebot.platform.time import SystemClock

log = logging.getLogger(__name__)


class TradeReconcilerMetrics:
    """
    TradeReconcilerMetrics — Prometheus metrics bundle for the trade reconciler worker.

    Related:
      - apps/worker/trade_reconciler/wiring/modules/trade_reconciler.py
      - apps/worker/trade_reconciler/main/main.py
    """

    def __init__(self) -> None:
        """
        Register Prometheus metrics used by reconciler runtime.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Metrics are created once per worker process.
        Raises:
            ValueError: Propagated by prometheus client on duplicate metric names.
        Side Effects:
            Registers metrics in default Prometheus registry.
        """
        self.passes_total = Counter(
            "tradebot_reconciler_passes_total",
            "Trade reconciler successful passes count",
        )
        self.pass_errors_total = Counter(
            "tradebot_reconciler_pass_errors_total",
            "Trade reconciler pass failures count",
        )
        self.attempts_scanned_total = Counter(
            "tradebot_reconciler_attempts_scanned_total",
            "Trade attempts inspected by reconciler count",
        )
        self.attempt_errors_total = Counter(
            "tradebot_reconciler_attempt_errors_total",
            "Trade attempts that failed to settle in a pass count",
        )
        self.attempts_skipped_total = Counter(
            "tradebot_reconciler_attempts_skipped_total",
            "Trade attempts moved by a concurrent writer during a pass count",
        )
        self.attempts_settled_total = Counter(
            "tradebot_reconciler_attempts_settled_total",
            "Trade attempts settled by reconciler count",
            ("status",),
        )
        self.pass_duration_seconds = Histogram(
            "tradebot_reconciler_pass_duration_seconds",
            "Trade reconciler pass duration in seconds",
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 15.0, 60.0),
        )

    def observe_pass(self, *, report: ReconciliationReport, duration_seconds: float) -> None:
        self.passes_total.inc()
        self.attempts_scanned_total.inc(report.scanned)
        self.attempt_errors_total.inc(report.errors)
        self.attempts_skipped_total.inc(report.skipped)
        self.pass_duration_seconds.observe(max(duration_seconds, 0.0))

    def reconciler_hooks(self) -> TradeExecutionHooks:
        return TradeExecutionHooks(
            on_attempt_settled=lambda status: self.attempts_settled_total.labels(
                status=status,
            ).inc(),
        )


@dataclass(frozen=True, slots=True)
class TradeReconcilerApp:
    """
    TradeReconcilerApp — runtime loop wrapper over `ReconcileTradeAttemptsUseCase`.

    Related:
      - src/tradebot/contexts/execution/application/use_cases/reconcile_trade_attempts.py
      - apps/worker/trade_reconciler/main/main.py
      - configs/dev/tradebot.yaml
    """

    poll_interval_seconds: int
    reconciler: ReconcileTradeAttemptsUseCase
    metrics: TradeReconcilerMetrics
    metrics_port: int

    def __post_init__(self) -> None:
        if self.poll_interval_seconds <= 0:
            raise ValueError("TradeReconcilerApp.poll_interval_seconds must be > 0")
        if self.metrics_port <= 0:
            raise ValueError("TradeReconcilerApp.metrics_port must be > 0")

    async def run(self, stop_event: asyncio.Event) -> None:
        """
        Run reconciliation loop until stop event is set.

        Args:
            stop_event: Cooperative shutdown signal shared with process entrypoint.
        Returns:
            None.
        Assumptions:
            One pass is blocking IO and runs in the default executor.
        Raises:
            None.
        Side Effects:
            Starts Prometheus HTTP endpoint and performs storage/chain IO each pass.
        """
        start_http_server(self.metrics_port)
        log.info("trade reconciler metrics server started on port %s", self.metrics_port)
        loop = asyncio.get_running_loop()
        while not stop_event.is_set():
            started = loop.time()
            try:
                report = await loop.run_in_executor(None, self.reconciler.reconcile_once)
                self.metrics.observe_pass(
                    report=report,
                    duration_seconds=loop.time() - started,
                )
            except Exception:  # noqa: BLE001
                self.metrics.pass_errors_total.inc()
                log.exception("trade reconciler pass failed")

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.poll_interval_seconds)
            except TimeoutError:
                continue


def build_trade_reconciler_app(
    *,
    config_path: str | Path,
    environ: Mapping[str, str],
    metrics_port: int | None = None,
) -> TradeReconcilerApp:
    """
    Build fully wired trade reconciler worker app.

    Args:
        config_path: Path to `tradebot.yaml`.
        environ: Runtime environment mapping.
        metrics_port: Optional Prometheus port override.
    Returns:
        TradeReconcilerApp: Ready-to-run app instance.
    Assumptions:
        Reconciliation only makes sense against durable storage, so Postgres is required.
    Raises:
        ValueError: If required runtime configuration/env variables are missing.
    Side Effects:
        Creates storage gateway and web3 provider.
    """
    settings = resolve_tradebot_runtime_settings(environ=environ)
    if not settings.postgres_dsn:
        raise ValueError("trade reconciler requires TRADEBOT_PG_DSN")
    runtime_config = load_trade_execution_runtime_config(config_path)
    effective_metrics_port = (
        metrics_port if metrics_port is not None else runtime_config.reconciler.metrics_port
    )

    gateway = PsycopgPostgresGateway(dsn=settings.postgres_dsn)
    clock = SystemClock()
    metrics = TradeReconcilerMetrics()
    reconciler = ReconcileTradeAttemptsUseCase(
        attempts=PostgresTradeAttemptRepository(gateway=gateway),
        chain=Web3EvmChainGateway(
            config=Web3EvmChainGatewayConfig(
                rpc_url=settings.rpc_url,
                chain_id=runtime_config.chain.chain_id,
                request_timeout_s=runtime_config.chain.request_timeout_s,
            ),
        ),
        recorder=LedgerTradeRecorder(
            record_trade=RecordTradeUseCase(
                repository=PostgresTradeLedgerRepository(gateway=gateway),
                clock=clock,
            ),
        ),
        clock=clock,
        stale_after_s=runtime_config.reconciler.stale_after_s,
        batch_size=runtime_config.reconciler.batch_size,
        hooks=metrics.reconciler_hooks(),
    )
    return TradeReconcilerApp(
        poll_interval_seconds=runtime_config.reconciler.poll_interval_seconds,
        reconciler=reconciler,
        metrics=metrics,
        metrics_port=effective_metrics_port,
    )
