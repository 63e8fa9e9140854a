"""Create tradebot v1 tables for users, custodial wallets, ledger, and trade attempts."""

from __future__ import annotations

from alembic import op

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """
    Apply tradebot v1 storage schema.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Migration runs on a fresh database; statements are idempotent for re-runs.
    Raises:
        Exception: Postgres execution errors from Alembic runtime.
    Side Effects:
        Creates tradebot tables, constraints, and indexes.
    """
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS tradebot_users (
            user_id TEXT PRIMARY KEY,
            username TEXT NULL,
            registered_at TIMESTAMPTZ NOT NULL
        )
        """
    )

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS tradebot_wallets (
            user_id TEXT PRIMARY KEY REFERENCES tradebot_users (user_id),
            address TEXT NOT NULL,
            encrypted_private_key JSONB NOT NULL,
            created_at TIMESTAMPTZ NOT NULL,
            updated_at TIMESTAMPTZ NOT NULL,
            CONSTRAINT tradebot_wallets_address_chk
                CHECK (address ~ '^0x[0-9a-fA-F]{40}$'),
            CONSTRAINT tradebot_wallets_envelope_shape_chk
                CHECK (
                    jsonb_typeof(encrypted_private_key) = 'object'
                    AND encrypted_private_key ? 'ciphertext'
                    AND encrypted_private_key ? 'iv'
                    AND encrypted_private_key ? 'tag'
                )
        )
        """
    )

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS tradebot_transactions (
            record_id UUID PRIMARY KEY,
            user_id TEXT NOT NULL,
            symbol TEXT NOT NULL,
            amount NUMERIC NOT NULL,
            order_type TEXT NOT NULL,
            price_usd NUMERIC NULL,
            recorded_at TIMESTAMPTZ NOT NULL,
            CONSTRAINT tradebot_transactions_order_type_chk
                CHECK (order_type IN ('buy', 'sell')),
            CONSTRAINT tradebot_transactions_amount_chk
                CHECK (amount > 0)
        )
        """
    )
    op.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_tradebot_transactions_user_recorded
            ON tradebot_transactions (user_id, recorded_at DESC, record_id DESC)
        """
    )

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS tradebot_trade_attempts (
            attempt_id UUID PRIMARY KEY,
            user_id TEXT NOT NULL,
            side TEXT NOT NULL,
            token_address TEXT NOT NULL,
            sell_amount_raw NUMERIC(78, 0) NOT NULL,
            status TEXT NOT NULL,
            tx_hash TEXT NULL,
            symbol TEXT NOT NULL,
            ledger_amount NUMERIC NULL,
            price_usd NUMERIC NULL,
            created_at TIMESTAMPTZ NOT NULL,
            updated_at TIMESTAMPTZ NOT NULL,
            CONSTRAINT tradebot_trade_attempts_side_chk
                CHECK (side IN ('buy', 'sell')),
            CONSTRAINT tradebot_trade_attempts_status_chk
                CHECK (
                    status IN ('pending', 'submitted', 'confirmed', 'recorded', 'failed', 'unknown')
                )
        )
        """
    )
    op.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_tradebot_trade_attempts_status_created
            ON tradebot_trade_attempts (status, created_at, attempt_id)
        """
    )


def downgrade() -> None:
    """
    Drop tradebot v1 storage schema.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Used only on disposable environments.
    Raises:
        Exception: Postgres execution errors from Alembic runtime.
    Side Effects:
        Drops tradebot tables and all stored data.
    """
    op.execute("DROP TABLE IF EXISTS tradebot_trade_attempts")
    op.execute("DROP TABLE IF EXISTS tradebot_transactions")
    op.execute("DROP TABLE IF EXISTS tradebot_wallets")
    op.execute("DROP TABLE IF EXISTS tradebot_users")
