from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Mapping

from tradebot.contexts.custody.application.ports import WalletRepository
from tradebot.contexts.custody.domain.entities import UserWallet
from tradebot.contexts.custody.domain.value_objects import EncryptedKeyEnvelope
from tradebot.platform.persistence.postgres import PostgresGateway
from tradebot.shared_kernel.primitives import EvmAddress, UserId

_WALLET_COLUMNS = """
            user_id,
            address,
            encrypted_private_key,
            created_at,
            updated_at
"""


class PostgresWalletRepository(WalletRepository):
    """
    PostgresWalletRepository — Postgres adapter for users and custodial wallets.

    Related:
      - src/tradebot/contexts/custody/application/ports/wallet_repository.py
      - alembic/versions/20261019_0001_tradebot_storage_v1.py
      - src/tradebot/platform/persistence/postgres/gateway.py
    """

    def __init__(
        self,
        *,
        gateway: PostgresGateway,
        users_table: str = "tradebot_users",
        wallets_table: str = "tradebot_wallets",
    ) -> None:
        """
        Initialize repository with SQL gateway and table names.

        Args:
            gateway: SQL gateway abstraction.
            users_table: Users table name.
            wallets_table: Wallets table name.
        Returns:
            None.
        Assumptions:
            Tables follow migration `20261019_0001_tradebot_storage_v1`.
        Raises:
            ValueError: If dependencies are invalid.
        Side Effects:
            None.
        """
        if gateway is None:  # type: ignore[truthy-bool]
            raise ValueError("PostgresWalletRepository requires gateway")
        normalized_users_table = users_table.strip()
        normalized_wallets_table = wallets_table.strip()
        if not normalized_users_table:
            raise ValueError("PostgresWalletRepository requires non-empty users_table")
        if not normalized_wallets_table:
            raise ValueError("PostgresWalletRepository requires non-empty wallets_table")
        self._gateway = gateway
        self._users_table = normalized_users_table
        self._wallets_table = normalized_wallets_table

    def register_user(
        self,
        *,
        user_id: UserId,
        username: str | None,
        registered_at: datetime,
    ) -> None:
        """
        Insert user row or refresh username when a new one is provided.

        Args:
            user_id: Front-end user identifier.
            username: Optional display handle.
            registered_at: UTC timestamp of first contact.
        Returns:
            None.
        Assumptions:
            `NULL` username never overwrites a stored one.
        Raises:
            Exception: Driver errors from gateway.
        Side Effects:
            Executes one SQL upsert statement.
        """
        query = f"""
        INSERT INTO {self._users_table}
        (
            user_id,
            username,
            registered_at
        )
        VALUES
        (
            %(user_id)s,
            %(username)s,
            %(registered_at)s
        )
        ON CONFLICT (user_id) DO UPDATE
        SET username = COALESCE(EXCLUDED.username, {self._users_table}.username)
        """
        self._gateway.execute(
            query=query,
            parameters={
                "user_id": str(user_id),
                "username": username,
                "registered_at": registered_at,
            },
        )

    def find_by_user_id(self, *, user_id: UserId) -> UserWallet | None:
        """
        Fetch wallet row by owner.

        Args:
            user_id: Wallet owner.
        Returns:
            UserWallet | None: Wallet snapshot or `None`.
        Assumptions:
            `user_id` is the wallets primary key.
        Raises:
            ValueError: If row mapping is malformed.
        Side Effects:
            Executes one SQL select statement.
        """
        query = f"""
        SELECT
{_WALLET_COLUMNS}
        FROM {self._wallets_table}
        WHERE user_id = %(user_id)s
        """
        row = self._gateway.fetch_one(query=query, parameters={"user_id": str(user_id)})
        if row is None:
            return None
        return _map_wallet_row(row=row)

    def create(self, *, wallet: UserWallet) -> UserWallet | None:
        """
        Insert wallet unless the owner already has one.

        Args:
            wallet: New wallet snapshot.
        Returns:
            UserWallet | None: Inserted wallet or `None` on primary key conflict.
        Assumptions:
            Concurrent inserts are serialized by the primary key.
        Raises:
            ValueError: If returned row mapping is malformed.
        Side Effects:
            Executes one SQL insert statement.
        """
        query = f"""
        INSERT INTO {self._wallets_table}
        (
{_WALLET_COLUMNS}
        )
        VALUES
        (
            %(user_id)s,
            %(address)s,
            %(encrypted_private_key)s::jsonb,
            %(created_at)s,
            %(updated_at)s
        )
        ON CONFLICT (user_id) DO NOTHING
        RETURNING
{_WALLET_COLUMNS}
        """
        row = self._gateway.fetch_one(query=query, parameters=_wallet_parameters(wallet=wallet))
        if row is None:
            return None
        return _map_wallet_row(row=row)

    def upsert(self, *, wallet: UserWallet) -> UserWallet:
        """
        Insert wallet or overwrite address and envelope of the existing row.

        Args:
            wallet: Wallet snapshot to store.
        Returns:
            UserWallet: Stored snapshot with original `created_at`.
        Assumptions:
            None.
        Raises:
            ValueError: If returned row is missing or malformed.
        Side Effects:
            Executes one SQL upsert statement.
        """
        query = f"""
        INSERT INTO {self._wallets_table}
        (
{_WALLET_COLUMNS}
        )
        VALUES
        (
            %(user_id)s,
            %(address)s,
            %(encrypted_private_key)s::jsonb,
            %(created_at)s,
            %(updated_at)s
        )
        ON CONFLICT (user_id) DO UPDATE
        SET
            address = EXCLUDED.address,
            encrypted_private_key = EXCLUDED.encrypted_private_key,
            updated_at = EXCLUDED.updated_at
        RETURNING
{_WALLET_COLUMNS}
        """
        row = self._gateway.fetch_one(query=query, parameters=_wallet_parameters(wallet=wallet))
        if row is None:
            raise ValueError("PostgresWalletRepository upsert returned no row")
        return _map_wallet_row(row=row)


def _wallet_parameters(*, wallet: UserWallet) -> dict[str, Any]:
    return {
        "user_id": str(wallet.user_id),
        "address": str(wallet.address),
        "encrypted_private_key": json.dumps(
            wallet.envelope.to_mapping(),
            sort_keys=True,
            separators=(",", ":"),
        ),
        "created_at": wallet.created_at,
        "updated_at": wallet.updated_at,
    }


def _map_wallet_row(*, row: Mapping[str, Any]) -> UserWallet:
    """
    Map SQL row mapping into immutable domain `UserWallet`.

    Args:
        row: SQL result mapping.
    Returns:
        UserWallet: Domain wallet snapshot.
    Assumptions:
        JSONB column may arrive as dict (psycopg default) or JSON text.
    Raises:
        ValueError: If row fields are missing or malformed.
    Side Effects:
        None.
    """
    try:
        raw_envelope = row["encrypted_private_key"]
        if isinstance(raw_envelope, (bytes, bytearray)):
            raw_envelope = bytes(raw_envelope).decode("utf-8")
        if isinstance(raw_envelope, str):
            raw_envelope = json.loads(raw_envelope)
        if not isinstance(raw_envelope, Mapping):
            raise ValueError("encrypted_private_key must be JSON object")
        return UserWallet(
            user_id=UserId.from_string(str(row["user_id"])),
            address=EvmAddress(str(row["address"])),
            envelope=EncryptedKeyEnvelope.from_mapping(raw_envelope),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
    except (KeyError, TypeError, json.JSONDecodeError) as error:
        raise ValueError("PostgresWalletRepository cannot map wallet row") from error
