"""
Composition helpers for custody, execution, and ledger API modules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping

from fastapi import APIRouter
from prometheus_client import CollectorRegistry, Counter, Histogram, make_asgi_app
from starlette.types import ASGIApp

from apps.api.routes import build_ledger_router, build_trades_router, build_wallets_router
from tradebot.contexts.custody.adapters.outbound.clients.alchemy import (
    AlchemyTokenBalanceSource,
    AlchemyTokenBalanceSourceConfig,
)
from tradebot.contexts.custody.adapters.outbound.persistence.in_memory import (
    InMemoryWalletRepository,
)
from tradebot.contexts.custody.adapters.outbound.persistence.postgres import (
    PostgresWalletRepository,
)
from tradebot.contexts.custody.adapters.outbound.security import (
    AesGcmPrivateKeyVault,
    EthAccountFactory,
)
from tradebot.contexts.custody.application.ports import WalletRepository
from tradebot.contexts.custody.application.services import TokenSpamFilter
from tradebot.contexts.custody.application.use_cases import (
    EnsureUserWalletUseCase,
    GetWalletAddressUseCase,
    ImportUserWalletUseCase,
    ListTokenBalancesUseCase,
    ResolveSignerUseCase,
)
from tradebot.contexts.execution.adapters.outbound.acl.custody import CustodyTradeSignerResolver
from tradebot.contexts.execution.adapters.outbound.acl.ledger import LedgerTradeRecorder
from tradebot.contexts.execution.adapters.outbound.chain import (
    Web3EvmChainGateway,
    Web3EvmChainGatewayConfig,
)
from tradebot.contexts.execution.adapters.outbound.clients.dexscreener import (
    DexScreenerTokenPriceSource,
    DexScreenerTokenPriceSourceConfig,
)
from tradebot.contexts.execution.adapters.outbound.clients.zerox import (
    ZeroXSwapQuoteClient,
    ZeroXSwapQuoteClientConfig,
)
from tradebot.contexts.execution.adapters.outbound.config import (
    TradeExecutionRuntimeConfig,
    load_trade_execution_runtime_config,
)
from tradebot.contexts.execution.adapters.outbound.persistence.in_memory import (
    InMemoryTradeAttemptRepository,
)
from tradebot.contexts.execution.adapters.outbound.persistence.postgres import (
    PostgresTradeAttemptRepository,
)
from tradebot.contexts.execution.application.ports import TradeAttemptRepository
from tradebot.contexts.execution.application.services import (
    AllowanceManager,
    PerUserTradeLock,
    TradeExecutionHooks,
)
from tradebot.contexts.execution.application.use_cases import ExecuteTradeUseCase
from tradebot.contexts.ledger.adapters.outbound.persistence.in_memory import (
    InMemoryTradeLedgerRepository,
)
from tradebot.contexts.ledger.adapters.outbound.persistence.postgres import (
    PostgresTradeLedgerRepository,
)
from tradebot.contexts.ledger.application.ports import TradeLedgerRepository
from tradebot.contexts.ledger.application.use_cases import (
    ListHoldingsUseCase,
    ListTradeHistoryUseCase,
    RecordTradeUseCase,
)
from tradebot.platform.config import (
    TradeBotRuntimeSettings,
    resolve_tradebot_config_path,
    resolve_tradebot_runtime_settings,
)
from tradebot.platform.persistence.postgres import PsycopgPostgresGateway
from tradebot.platform.time import SystemClock

log = logging.getLogger(__name__)


class TradeExecutionMetrics:
    """
    TradeExecutionMetrics — Prometheus metrics bundle for the API trade pipeline.

    Related:
      - src/tradebot/contexts/execution/application/services/trade_execution_hooks.py
      - apps/api/main/app.py
    """

    def __init__(self, *, registry: CollectorRegistry) -> None:
        """
        Register trade metrics in a per-app registry.

        Args:
            registry: Target Prometheus registry.
        Returns:
            None.
        Assumptions:
            One registry per app instance, so repeated app construction in tests is safe.
        Raises:
            ValueError: Propagated by prometheus client on duplicate metric names.
        Side Effects:
            Registers metrics in `registry`.
        """
        self.trades_succeeded_total = Counter(
            "tradebot_trades_succeeded_total",
            "Confirmed and recorded trades count",
            ("side",),
            registry=registry,
        )
        self.trades_failed_total = Counter(
            "tradebot_trades_failed_total",
            "Failed trades count by error code",
            ("side", "code"),
            registry=registry,
        )
        self.trade_duration_seconds = Histogram(
            "tradebot_trade_duration_seconds",
            "Trade pipeline duration in seconds",
            ("side",),
            buckets=(0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0, 300.0),
            registry=registry,
        )
        self.approvals_sent_total = Counter(
            "tradebot_approvals_sent_total",
            "ERC-20 approval transactions broadcast count",
            registry=registry,
        )

    def trade_execution_hooks(self) -> TradeExecutionHooks:
        return TradeExecutionHooks(
            on_trade_succeeded=lambda side: self.trades_succeeded_total.labels(side=side).inc(),
            on_trade_failed=lambda side, code: self.trades_failed_total.labels(
                side=side,
                code=code,
            ).inc(),
            on_trade_duration=lambda side, seconds: self.trade_duration_seconds.labels(
                side=side,
            ).observe(max(seconds, 0.0)),
            on_approval_sent=self.approvals_sent_total.inc,
        )


@dataclass(frozen=True, slots=True)
class TradeBotApiModule:
    """
    TradeBotApiModule — wired routers, metrics endpoint, and shutdown callback.

    Related:
      - apps/api/main/app.py
      - apps/api/routes/trades.py
    """

    router: APIRouter
    metrics_app: ASGIApp
    close: Callable[[], None]


@dataclass(frozen=True, slots=True)
class _Repositories:
    wallets: WalletRepository
    ledger: TradeLedgerRepository
    attempts: TradeAttemptRepository


def build_tradebot_api_module(
    *,
    environ: Mapping[str, str],
    cli_config_path: str | Path | None = None,
) -> TradeBotApiModule:
    """
    Build fully wired tradebot API module from environment and runtime YAML.

    Args:
        environ: Runtime environment mapping.
        cli_config_path: Optional explicit runtime config path.
    Returns:
        TradeBotApiModule: Router, metrics app, and close callback.
    Assumptions:
        Persistence uses Postgres when DSN is configured, in-memory fallback otherwise.
    Raises:
        FileNotFoundError: If runtime config path is missing.
        ValueError: If settings or config values are invalid.
        KeyVaultConfigurationError: If encryption key is malformed.
    Side Effects:
        Reads runtime YAML and creates HTTP sessions and thread pools.
    """
    settings = resolve_tradebot_runtime_settings(environ=environ)
    config_path = resolve_tradebot_config_path(environ=environ, cli_config_path=cli_config_path)
    runtime_config = load_trade_execution_runtime_config(config_path)
    log.info(
        "tradebot api wiring env=%s fail_fast=%s storage=%s config=%s",
        settings.env_name,
        settings.fail_fast,
        "postgres" if settings.postgres_dsn else "in_memory",
        config_path,
    )

    repositories = _build_repositories(settings=settings)
    clock = SystemClock()
    vault = AesGcmPrivateKeyVault(key_b64=settings.encryption_key_b64)
    account_factory = EthAccountFactory()
    registry = CollectorRegistry()
    metrics = TradeExecutionMetrics(registry=registry)

    ensure_wallet = EnsureUserWalletUseCase(
        repository=repositories.wallets,
        vault=vault,
        account_factory=account_factory,
        clock=clock,
    )
    import_wallet = ImportUserWalletUseCase(
        repository=repositories.wallets,
        vault=vault,
        account_factory=account_factory,
        clock=clock,
    )
    resolve_signer = ResolveSignerUseCase(
        repository=repositories.wallets,
        vault=vault,
        account_factory=account_factory,
    )
    list_token_balances = ListTokenBalancesUseCase(
        repository=repositories.wallets,
        balance_source=AlchemyTokenBalanceSource(
            config=AlchemyTokenBalanceSourceConfig(
                rpc_url=settings.alchemy_url,
                timeout_s=runtime_config.balances.timeout_s,
            ),
        ),
        spam_filter=TokenSpamFilter() if runtime_config.balances.spam_filter_enabled else None,
        max_workers=runtime_config.balances.max_workers,
    )

    execute_trade = _build_execute_trade(
        settings=settings,
        runtime_config=runtime_config,
        repositories=repositories,
        resolve_signer=resolve_signer,
        hooks=metrics.trade_execution_hooks(),
    )

    router = APIRouter()
    router.include_router(
        build_wallets_router(
            ensure_wallet=ensure_wallet,
            import_wallet=import_wallet,
            get_wallet_address=GetWalletAddressUseCase(repository=repositories.wallets),
            list_token_balances=list_token_balances,
        )
    )
    router.include_router(build_trades_router(execute_trade=execute_trade))
    router.include_router(
        build_ledger_router(
            list_holdings=ListHoldingsUseCase(repository=repositories.ledger),
            list_trade_history=ListTradeHistoryUseCase(
                repository=repositories.ledger,
                default_limit=runtime_config.history_default_limit,
            ),
        )
    )
    return TradeBotApiModule(
        router=router,
        metrics_app=make_asgi_app(registry=registry),
        close=execute_trade.close,
    )


def _build_execute_trade(
    *,
    settings: TradeBotRuntimeSettings,
    runtime_config: TradeExecutionRuntimeConfig,
    repositories: _Repositories,
    resolve_signer: ResolveSignerUseCase,
    hooks: TradeExecutionHooks,
) -> ExecuteTradeUseCase:
    """
    Build trade pipeline with 0x, DexScreener, web3, and ledger ACL adapters.

    Args:
        settings: Resolved environment settings.
        runtime_config: Parsed runtime YAML.
        repositories: Storage adapters.
        resolve_signer: Custody signer use-case.
        hooks: Metrics callbacks.
    Returns:
        ExecuteTradeUseCase: Wired trade pipeline.
    Assumptions:
        Allowance and swap receipts share one timeout budget.
    Raises:
        ValueError: If adapter configs are invalid.
    Side Effects:
        Creates HTTP sessions and web3 provider.
    """
    clock = SystemClock()
    chain = Web3EvmChainGateway(
        config=Web3EvmChainGatewayConfig(
            rpc_url=settings.rpc_url,
            chain_id=runtime_config.chain.chain_id,
            request_timeout_s=runtime_config.chain.request_timeout_s,
        ),
    )
    return ExecuteTradeUseCase(
        signer_resolver=CustodyTradeSignerResolver(resolve_signer=resolve_signer),
        quote_source=ZeroXSwapQuoteClient(
            config=ZeroXSwapQuoteClientConfig(
                quote_url=runtime_config.quote.url,
                api_key=settings.zerox_api_key,
                chain_id=runtime_config.chain.chain_id,
                timeout_s=runtime_config.quote.timeout_s,
            ),
        ),
        price_source=DexScreenerTokenPriceSource(
            config=DexScreenerTokenPriceSourceConfig(
                api_base_url=runtime_config.price.url,
                timeout_s=runtime_config.price.timeout_s,
            ),
        ),
        chain=chain,
        allowance_manager=AllowanceManager(
            chain=chain,
            receipt_timeout_s=runtime_config.chain.receipt_timeout_s,
            hooks=hooks,
        ),
        recorder=LedgerTradeRecorder(
            record_trade=RecordTradeUseCase(repository=repositories.ledger, clock=clock),
        ),
        attempts=repositories.attempts,
        clock=clock,
        receipt_timeout_s=runtime_config.chain.receipt_timeout_s,
        trade_lock=PerUserTradeLock(),
        hooks=hooks,
    )


def _build_repositories(*, settings: TradeBotRuntimeSettings) -> _Repositories:
    """
    Build repositories using Postgres when configured or in-memory fallback.

    Args:
        settings: Resolved runtime settings.
    Returns:
        _Repositories: Storage adapters.
    Assumptions:
        Settings resolver already rejected a missing DSN under fail-fast.
    Raises:
        None.
    Side Effects:
        None.
    """
    if settings.postgres_dsn:
        gateway = PsycopgPostgresGateway(dsn=settings.postgres_dsn)
        return _Repositories(
            wallets=PostgresWalletRepository(gateway=gateway),
            ledger=PostgresTradeLedgerRepository(gateway=gateway),
            attempts=PostgresTradeAttemptRepository(gateway=gateway),
        )

    log.warning("tradebot storage is in-memory; wallets and ledger are lost on restart")
    return _Repositories(
        wallets=InMemoryWalletRepository(),
        ledger=InMemoryTradeLedgerRepository(),
        attempts=InMemoryTradeAttemptRepository(),
    )
