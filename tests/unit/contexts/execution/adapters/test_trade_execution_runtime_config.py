from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from tradebot.contexts.execution.adapters.outbound.config import (
    build_trade_execution_runtime_config,
    load_trade_execution_runtime_config,
)

_REPO_ROOT = Path(__file__).resolve().parents[5]


def _write_config(tmp_path: Path, *, body: str) -> Path:
    """
    Write temporary tradebot YAML used by config-loader tests.

    Args:
        tmp_path: pytest temporary path fixture.
        body: Full YAML content.
    Returns:
        Path: Written config path.
    Assumptions:
        Input text is valid UTF-8.
    Raises:
        OSError: If write fails.
    Side Effects:
        Creates one temp file.
    """
    config_path = tmp_path / "tradebot.yaml"
    config_path.write_text(body, encoding="utf-8")
    return config_path


@pytest.mark.parametrize("env_name", ["dev", "prod", "test"])
def test_shipped_environment_configs_are_valid(env_name: str) -> None:
    """
    Verify every committed `configs/<env>/tradebot.yaml` passes loader validation.

    Args:
        env_name: Environment directory name.
    Returns:
        None.
    Assumptions:
        Repository layout keeps configs at root.
    Raises:
        AssertionError: If a shipped config violates invariants.
    Side Effects:
        Reads config files from disk.
    """
    config = load_trade_execution_runtime_config(
        _REPO_ROOT / "configs" / env_name / "tradebot.yaml"
    )

    assert config.version == 1
    assert config.chain.chain_id == 8453
    assert config.reconciler.stale_after_s > config.chain.receipt_timeout_s


def test_loader_applies_defaults_for_missing_sections(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, body="version: 1\ntradebot: {}\n")

    config = load_trade_execution_runtime_config(config_path)

    assert config.chain.receipt_timeout_s == 120.0
    assert config.quote.url == "https://api.0x.org/swap/allowance-holder/quote"
    assert config.price.url == "https://api.dexscreener.com/latest/dex"
    assert config.balances.spam_filter_enabled is True
    assert config.history_default_limit == 20
    assert config.reconciler.stale_after_s == 300.0


def test_loader_reads_explicit_values(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        body="""
version: 1
tradebot:
  chain:
    chain_id: 84532
    receipt_timeout_s: 60
  balances:
    max_workers: 2
    spam_filter_enabled: false
  ledger:
    history_default_limit: 50
  reconciler:
    stale_after_s: 90
""".strip(),
    )

    config = load_trade_execution_runtime_config(config_path)

    assert config.chain.chain_id == 84532
    assert config.chain.receipt_timeout_s == 60.0
    assert config.balances.max_workers == 2
    assert config.balances.spam_filter_enabled is False
    assert config.history_default_limit == 50
    assert config.reconciler.stale_after_s == 90.0


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"tradebot": {}}, "missing required key: version"),
        ({"version": 1}, "missing required key: tradebot"),
        ({"version": 1, "tradebot": {"ledger": {"history_default_limit": 0}}}, r"\[1, 500\]"),
        ({"version": 1, "tradebot": {"ledger": {"history_default_limit": 501}}}, r"\[1, 500\]"),
        (
            {
                "version": 1,
                "tradebot": {
                    "chain": {"receipt_timeout_s": 120},
                    "reconciler": {"stale_after_s": 120},
                },
            },
            "stale_after_s must be >",
        ),
        ({"version": 1, "tradebot": {"chain": {"chain_id": True}}}, "expected int"),
        ({"version": 1, "tradebot": {"quote": {"url": "ftp://quotes"}}}, "http"),
        (
            {"version": 1, "tradebot": {"balances": {"spam_filter_enabled": "yes"}}},
            "expected bool",
        ),
    ],
)
def test_builder_rejects_invalid_payloads(payload: dict[str, Any], message: str) -> None:
    with pytest.raises(ValueError, match=message):
        build_trade_execution_runtime_config(payload)


def test_loader_raises_for_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_trade_execution_runtime_config(tmp_path / "absent.yaml")
