from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

import pytest

from tradebot.contexts.execution.adapters.outbound.persistence.postgres import (
    PostgresTradeAttemptRepository,
)
from tradebot.contexts.execution.domain.entities import TradeAttempt
from tradebot.contexts.execution.domain.value_objects import TradeAttemptStatus, TradeSide
from tradebot.shared_kernel.primitives import EvmAddress, UserId

_CREATED_AT = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
_ATTEMPT_ID = UUID("00000000-0000-0000-0000-000000000a01")
_TX_HASH = "0x" + "ab" * 32


class _GatewayStub:
    """
    SQL gateway stub recording every call and replaying configured rows.
    """

    def __init__(
        self,
        *,
        one: Mapping[str, Any] | None = None,
        rows: tuple[Mapping[str, Any], ...] = (),
    ) -> None:
        self._one = one
        self._rows = rows
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def fetch_one(self, *, query: str, parameters: Mapping[str, Any]) -> Mapping[str, Any] | None:
        self.calls.append(("fetch_one", query, dict(parameters)))
        return self._one

    def fetch_all(
        self,
        *,
        query: str,
        parameters: Mapping[str, Any],
    ) -> tuple[Mapping[str, Any], ...]:
        self.calls.append(("fetch_all", query, dict(parameters)))
        return self._rows

    def execute(self, *, query: str, parameters: Mapping[str, Any]) -> None:
        self.calls.append(("execute", query, dict(parameters)))


def _attempt(*, status: TradeAttemptStatus = TradeAttemptStatus.PENDING) -> TradeAttempt:
    return TradeAttempt(
        attempt_id=_ATTEMPT_ID,
        user_id=UserId("42"),
        side=TradeSide.SELL,
        token_address=EvmAddress("0x" + "cd" * 20),
        sell_amount_raw=2**200,
        status=status,
        tx_hash=None if status is TradeAttemptStatus.PENDING else _TX_HASH,
        symbol="DEGEN",
        ledger_amount=Decimal("12.5"),
        price_usd=None,
        created_at=_CREATED_AT,
        updated_at=_CREATED_AT,
    )


def test_postgres_trade_attempt_repository_create_binds_uint256_as_numeric() -> None:
    """
    Verify insert binds raw amount as exact Decimal so uint256 values fit NUMERIC(78, 0).

    Args:
        None.
    Returns:
        None.
    Assumptions:
        psycopg adapts Decimal to NUMERIC without precision loss.
    Raises:
        AssertionError: If bind parameters drift from schema.
    Side Effects:
        None.
    """
    gateway = _GatewayStub()
    repository = PostgresTradeAttemptRepository(gateway=gateway)

    repository.create(attempt=_attempt())

    method, query, parameters = gateway.calls[0]
    assert method == "execute"
    assert "INSERT INTO tradebot_trade_attempts" in query
    assert parameters["sell_amount_raw"] == Decimal(2**200)
    assert parameters["status"] == "pending"
    assert parameters["side"] == "sell"
    assert parameters["attempt_id"] == str(_ATTEMPT_ID)


def test_postgres_trade_attempt_repository_save_uses_compare_and_set() -> None:
    """
    Verify update is guarded by expected status and reports lost races as `False`.
    """
    submitted = _attempt().transition(
        status=TradeAttemptStatus.SUBMITTED,
        changed_at=_CREATED_AT,
        tx_hash=_TX_HASH,
    )
    winning_gateway = _GatewayStub(one={"attempt_id": str(_ATTEMPT_ID)})
    losing_gateway = _GatewayStub(one=None)

    assert PostgresTradeAttemptRepository(gateway=winning_gateway).save(
        attempt=submitted,
        expected_status=TradeAttemptStatus.PENDING,
    )
    assert not PostgresTradeAttemptRepository(gateway=losing_gateway).save(
        attempt=submitted,
        expected_status=TradeAttemptStatus.PENDING,
    )
    _, query, parameters = winning_gateway.calls[0]
    assert "AND status = %(expected_status)s" in query
    assert parameters["expected_status"] == "pending"
    assert parameters["status"] == "submitted"
    assert parameters["tx_hash"] == _TX_HASH


def test_postgres_trade_attempt_repository_list_by_status_maps_rows() -> None:
    row = {
        "attempt_id": str(_ATTEMPT_ID),
        "user_id": "42",
        "side": "sell",
        "token_address": "0x" + "CD" * 20,
        "sell_amount_raw": Decimal(2**200),
        "status": "unknown",
        "tx_hash": _TX_HASH,
        "symbol": "DEGEN",
        "ledger_amount": Decimal("12.5"),
        "price_usd": Decimal("0.01"),
        "created_at": _CREATED_AT,
        "updated_at": _CREATED_AT,
    }
    gateway = _GatewayStub(rows=(row,))

    attempts = PostgresTradeAttemptRepository(gateway=gateway).list_by_status(
        statuses=(TradeAttemptStatus.SUBMITTED, TradeAttemptStatus.UNKNOWN),
        limit=50,
    )

    assert len(attempts) == 1
    assert attempts[0].sell_amount_raw == 2**200
    assert attempts[0].status is TradeAttemptStatus.UNKNOWN
    assert attempts[0].token_address == EvmAddress("0x" + "cd" * 20)
    assert attempts[0].price_usd == Decimal("0.01")
    _, query, parameters = gateway.calls[0]
    assert "ORDER BY created_at ASC, attempt_id ASC" in query
    assert parameters == {"statuses": ["submitted", "unknown"], "limit": 50}


def test_postgres_trade_attempt_repository_skips_query_for_empty_statuses() -> None:
    gateway = _GatewayStub()

    attempts = PostgresTradeAttemptRepository(gateway=gateway).list_by_status(
        statuses=(),
        limit=10,
    )

    assert attempts == ()
    assert gateway.calls == []


def test_postgres_trade_attempt_repository_rejects_malformed_row() -> None:
    gateway = _GatewayStub(rows=({"attempt_id": str(_ATTEMPT_ID)},))

    with pytest.raises(ValueError):
        PostgresTradeAttemptRepository(gateway=gateway).list_by_status(
            statuses=(TradeAttemptStatus.PENDING,),
            limit=10,
        )
