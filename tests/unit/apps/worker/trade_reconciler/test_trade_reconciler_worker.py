from __future__ import annotations

from pathlib import Path

import pytest

from apps.worker.trade_reconciler.main.main import main
from apps.worker.trade_reconciler.wiring.modules import (
    TradeReconcilerApp,
    build_trade_reconciler_app,
)

_REPO_ROOT = Path(__file__).resolve().parents[5]
_TEST_CONFIG = _REPO_ROOT / "configs" / "test" / "tradebot.yaml"


def _test_environ() -> dict[str, str]:
    return {
        "TRADEBOT_ENV": "test",
        "ENCRYPTION_KEY_BASE64": "MDEyMzQ1Njc4OWFiY2RlZjAxMjM0NTY3ODlhYmNkZWY=",
        "BASE_RPC_URL": "http://127.0.0.1:8545",
        "ALCHEMY_URL": "http://127.0.0.1:8546",
    }


def test_build_trade_reconciler_app_requires_postgres_dsn() -> None:
    """
    Verify worker wiring refuses to start without durable attempt storage.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Test environment is not fail-fast, so settings resolve without a DSN.
    Raises:
        AssertionError: If wiring accepts missing DSN.
    Side Effects:
        None.
    """
    with pytest.raises(ValueError, match="TRADEBOT_PG_DSN"):
        build_trade_reconciler_app(config_path=_TEST_CONFIG, environ=_test_environ())


@pytest.mark.parametrize(
    ("poll_interval_seconds", "metrics_port", "message"),
    [
        (0, 9300, "poll_interval_seconds"),
        (10, 0, "metrics_port"),
    ],
)
def test_trade_reconciler_app_rejects_non_positive_settings(
    poll_interval_seconds: int,
    metrics_port: int,
    message: str,
) -> None:
    with pytest.raises(ValueError, match=message):
        TradeReconcilerApp(
            poll_interval_seconds=poll_interval_seconds,
            reconciler=object(),  # type: ignore[arg-type]
            metrics=object(),  # type: ignore[arg-type]
            metrics_port=metrics_port,
        )


def test_main_returns_error_code_for_invalid_metrics_port() -> None:
    assert main(["--metrics-port", "0"]) == 1
