from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

from tradebot.contexts.ledger.application.ports import TradeLedgerRepository
from tradebot.contexts.ledger.domain.entities import Holding, TradeRecord
from tradebot.contexts.ledger.domain.value_objects import OrderType
from tradebot.platform.persistence.postgres import PostgresGateway
from tradebot.shared_kernel.primitives import UserId


class PostgresTradeLedgerRepository(TradeLedgerRepository):
    """
    PostgresTradeLedgerRepository — Postgres adapter for the append-only transactions ledger.

    Related:
      - src/tradebot/contexts/ledger/application/ports/trade_ledger_repository.py
      - alembic/versions/20261019_0001_tradebot_storage_v1.py
      - src/tradebot/platform/persistence/postgres/gateway.py
    """

    def __init__(
        self,
        *,
        gateway: PostgresGateway,
        table_name: str = "tradebot_transactions",
    ) -> None:
        """
        Initialize repository with SQL gateway and target table name.

        Args:
            gateway: SQL gateway abstraction.
            table_name: Ledger table name.
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
            raise ValueError("PostgresTradeLedgerRepository requires gateway")
        normalized_table_name = table_name.strip()
        if not normalized_table_name:
            raise ValueError("PostgresTradeLedgerRepository requires non-empty table_name")
        self._gateway = gateway
        self._table_name = normalized_table_name

    def append(self, *, record: TradeRecord) -> bool:
        """
        Insert one ledger row, skipping an already stored `record_id`.

        Args:
            record: Validated trade record.
        Returns:
            bool: `True` when the row was inserted.
        Assumptions:
            `record_id` is the primary key and doubles as idempotency key.
        Raises:
            Exception: Driver errors from gateway.
        Side Effects:
            Executes one SQL insert statement.
        """
        query = f"""
        INSERT INTO {self._table_name}
        (
            record_id,
            user_id,
            symbol,
            amount,
            order_type,
            price_usd,
            recorded_at
        )
        VALUES
        (
            %(record_id)s,
            %(user_id)s,
            %(symbol)s,
            %(amount)s,
            %(order_type)s,
            %(price_usd)s,
            %(recorded_at)s
        )
        ON CONFLICT (record_id) DO NOTHING
        RETURNING record_id
        """
        row = self._gateway.fetch_one(
            query=query,
            parameters={
                "record_id": str(record.record_id),
                "user_id": str(record.user_id),
                "symbol": record.symbol,
                "amount": record.amount,
                "order_type": record.order_type.value,
                "price_usd": record.price_usd,
                "recorded_at": record.recorded_at,
            },
        )
        return row is not None

    def list_holdings(self, *, user_id: UserId) -> tuple[Holding, ...]:
        """
        Aggregate signed amounts per symbol in SQL and keep positive nets.

        Args:
            user_id: Ledger owner.
        Returns:
            tuple[Holding, ...]: Holdings sorted by symbol.
        Assumptions:
            `order_type` column is constrained to `buy`/`sell`.
        Raises:
            ValueError: If one of rows cannot be mapped.
        Side Effects:
            Executes one SQL select statement.
        """
        query = f"""
        SELECT
            symbol,
            SUM(CASE WHEN order_type = 'buy' THEN amount ELSE -amount END) AS net_amount
        FROM {self._table_name}
        WHERE user_id = %(user_id)s
        GROUP BY symbol
        HAVING SUM(CASE WHEN order_type = 'buy' THEN amount ELSE -amount END) > 0
        ORDER BY symbol ASC
        """
        rows = self._gateway.fetch_all(query=query, parameters={"user_id": str(user_id)})
        return tuple(
            Holding(symbol=str(row["symbol"]), amount=Decimal(str(row["net_amount"])))
            for row in rows
        )

    def list_recent(self, *, user_id: UserId, limit: int | None) -> tuple[TradeRecord, ...]:
        """
        Return ledger rows newest first with optional SQL limit.

        Args:
            user_id: Ledger owner.
            limit: Optional row bound.
        Returns:
            tuple[TradeRecord, ...]: Rows ordered by `recorded_at DESC, record_id DESC`.
        Assumptions:
            `LIMIT NULL` means no limit in Postgres.
        Raises:
            ValueError: If one of rows cannot be mapped.
        Side Effects:
            Executes one SQL select statement.
        """
        query = f"""
        SELECT
            record_id,
            user_id,
            symbol,
            amount,
            order_type,
            price_usd,
            recorded_at
        FROM {self._table_name}
        WHERE user_id = %(user_id)s
        ORDER BY recorded_at DESC, record_id DESC
        LIMIT %(limit)s
        """
        rows = self._gateway.fetch_all(
            query=query,
            parameters={"user_id": str(user_id), "limit": limit},
        )
        return tuple(_map_trade_record_row(row=row) for row in rows)


def _map_trade_record_row(*, row: Mapping[str, Any]) -> TradeRecord:
    """
    Map SQL row mapping into immutable domain `TradeRecord`.

    Args:
        row: SQL result mapping.
    Returns:
        TradeRecord: Domain ledger row.
    Assumptions:
        Row follows schema from `tradebot_transactions` table.
    Raises:
        ValueError: If row fields are missing or malformed.
    Side Effects:
        None.
    """
    try:
        price_raw = row["price_usd"]
        return TradeRecord(
            record_id=UUID(str(row["record_id"])),
            user_id=UserId.from_string(str(row["user_id"])),
            symbol=str(row["symbol"]),
            amount=Decimal(str(row["amount"])),
            order_type=OrderType.parse(str(row["order_type"])),
            price_usd=Decimal(str(price_raw)) if price_raw is not None else None,
            recorded_at=row["recorded_at"],
        )
    except (KeyError, TypeError, ArithmeticError) as error:
        raise ValueError("PostgresTradeLedgerRepository cannot map trade record row") from error
