from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

from tradebot.contexts.execution.application.ports import TradeAttemptRepository
from tradebot.contexts.execution.domain.entities import TradeAttempt
from tradebot.contexts.execution.domain.value_objects import TradeAttemptStatus, TradeSide
from tradebot.platform.persistence.postgres import PostgresGateway
from tradebot.shared_kernel.primitives import EvmAddress, UserId

_SELECT_COLUMNS = """
            attempt_id,
            user_id,
            side,
            token_address,
            sell_amount_raw,
            status,
            tx_hash,
            symbol,
            ledger_amount,
            price_usd,
            created_at,
            updated_at
"""


class PostgresTradeAttemptRepository(TradeAttemptRepository):
    """
    PostgresTradeAttemptRepository — Postgres adapter for trade staging rows.

    Status changes use `UPDATE ... WHERE status = expected` so concurrent writers (request
    path and reconciler) settle each attempt at most once.

    Related:
      - src/tradebot/contexts/execution/application/ports/trade_attempt_repository.py
      - alembic/versions/20261019_0001_tradebot_storage_v1.py
      - src/tradebot/platform/persistence/postgres/gateway.py
    """

    def __init__(
        self,
        *,
        gateway: PostgresGateway,
        table_name: str = "tradebot_trade_attempts",
    ) -> None:
        """
        Initialize repository with SQL gateway and target table name.

        Args:
            gateway: SQL gateway abstraction.
            table_name: Staging table name.
        Returns:
            None.
        Assumptions:
            Table schema follows migration `20261019_0001_tradebot_storage_v1`.
        Raises:
            ValueError: If dependencies are invalid.
        Side Effects:
            None.
        """
        if gateway is None:  # type: ignore[truthy-bool]
            raise ValueError("PostgresTradeAttemptRepository requires gateway")
        normalized_table_name = table_name.strip()
        if not normalized_table_name:
            raise ValueError("PostgresTradeAttemptRepository requires non-empty table_name")
        self._gateway = gateway
        self._table_name = normalized_table_name

    def create(self, *, attempt: TradeAttempt) -> None:
        query = f"""
        INSERT INTO {self._table_name}
        (
{_SELECT_COLUMNS}
        )
        VALUES
        (
            %(attempt_id)s,
            %(user_id)s,
            %(side)s,
            %(token_address)s,
            %(sell_amount_raw)s,
            %(status)s,
            %(tx_hash)s,
            %(symbol)s,
            %(ledger_amount)s,
            %(price_usd)s,
            %(created_at)s,
            %(updated_at)s
        )
        """
        self._gateway.execute(query=query, parameters=_attempt_parameters(attempt=attempt))

    def save(self, *, attempt: TradeAttempt, expected_status: TradeAttemptStatus) -> bool:
        """
        Update mutable columns when stored status still equals `expected_status`.

        Args:
            attempt: Updated snapshot.
            expected_status: Previously observed status.
        Returns:
            bool: `True` when exactly one row was updated.
        Assumptions:
            Identity columns never change after insert.
        Raises:
            Exception: Driver errors from gateway.
        Side Effects:
            Executes one SQL update statement.
        """
        query = f"""
        UPDATE {self._table_name}
        SET
            status = %(status)s,
            tx_hash = %(tx_hash)s,
            ledger_amount = %(ledger_amount)s,
            updated_at = %(updated_at)s
        WHERE attempt_id = %(attempt_id)s
          AND status = %(expected_status)s
        RETURNING attempt_id
        """
        row = self._gateway.fetch_one(
            query=query,
            parameters={
                "attempt_id": str(attempt.attempt_id),
                "status": attempt.status.value,
                "tx_hash": attempt.tx_hash,
                "ledger_amount": attempt.ledger_amount,
                "updated_at": attempt.updated_at,
                "expected_status": expected_status.value,
            },
        )
        return row is not None

    def list_by_status(
        self,
        *,
        statuses: tuple[TradeAttemptStatus, ...],
        limit: int,
    ) -> tuple[TradeAttempt, ...]:
        if not statuses:
            return ()
        query = f"""
        SELECT
{_SELECT_COLUMNS}
        FROM {self._table_name}
        WHERE status = ANY(%(statuses)s)
        ORDER BY created_at ASC, attempt_id ASC
        LIMIT %(limit)s
        """
        rows = self._gateway.fetch_all(
            query=query,
            parameters={
                "statuses": [status.value for status in statuses],
                "limit": limit,
            },
        )
        return tuple(_map_trade_attempt_row(row=row) for row in rows)


def _attempt_parameters(*, attempt: TradeAttempt) -> dict[str, Any]:
    return {
        "attempt_id": str(attempt.attempt_id),
        "user_id": str(attempt.user_id),
        "side": attempt.side.value,
        "token_address": str(attempt.token_address),
        "sell_amount_raw": Decimal(attempt.sell_amount_raw),
        "status": attempt.status.value,
        "tx_hash": attempt.tx_hash,
        "symbol": attempt.symbol,
        "ledger_amount": attempt.ledger_amount,
        "price_usd": attempt.price_usd,
        "created_at": attempt.created_at,
        "updated_at": attempt.updated_at,
    }


def _map_trade_attempt_row(*, row: Mapping[str, Any]) -> TradeAttempt:
    """
    Map SQL row mapping into immutable domain `TradeAttempt`.

    Args:
        row: SQL result mapping.
    Returns:
        TradeAttempt: Domain staging row.
    Assumptions:
        `sell_amount_raw` is stored as `NUMERIC(78, 0)` to hold uint256 values.
    Raises:
        ValueError: If row fields are missing or malformed.
    Side Effects:
        None.
    """
    try:
        ledger_raw = row["ledger_amount"]
        price_raw = row["price_usd"]
        return TradeAttempt(
            attempt_id=UUID(str(row["attempt_id"])),
            user_id=UserId.from_string(str(row["user_id"])),
            side=TradeSide(str(row["side"])),
            token_address=EvmAddress(str(row["token_address"])),
            sell_amount_raw=int(Decimal(str(row["sell_amount_raw"]))),
            status=TradeAttemptStatus(str(row["status"])),
            tx_hash=str(row["tx_hash"]) if row["tx_hash"] is not None else None,
            symbol=str(row["symbol"]),
            ledger_amount=Decimal(str(ledger_raw)) if ledger_raw is not None else None,
            price_usd=Decimal(str(price_raw)) if price_raw is not None else None,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
    except (KeyError, TypeError, ArithmeticError) as error:
        raise ValueError("PostgresTradeAttemptRepository cannot map trade attempt row") from error
