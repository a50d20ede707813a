"""002: create users table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # No CHECK (balance >= 0): withdrawal approval without a hold may overdraw.
    op.execute("""
        CREATE TABLE users (
            id              VARCHAR(64)     PRIMARY KEY DEFAULT gen_random_uuid()::text,
            username        VARCHAR(64)     NOT NULL,
            email           VARCHAR(255)    NOT NULL,
            password_hash   VARCHAR(255)    NOT NULL,
            role            VARCHAR(16)     NOT NULL DEFAULT 'client',
            is_banned       BOOLEAN         NOT NULL DEFAULT FALSE,
            balance         NUMERIC(12, 2)  NOT NULL DEFAULT 0,
            pending_balance NUMERIC(12, 2)  NOT NULL DEFAULT 0,
            held_balance    NUMERIC(12, 2)  NOT NULL DEFAULT 0,
            total_earnings  NUMERIC(12, 2)  NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_username    UNIQUE (username),
            CONSTRAINT uq_users_email       UNIQUE (email),
            CONSTRAINT ck_users_username_len CHECK (LENGTH(username) >= 3),
            CONSTRAINT ck_users_role CHECK (role IN ('client', 'seller', 'admin')),
            CONSTRAINT ck_users_total_earnings CHECK (total_earnings >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE users IS 'Users and their balances (written only by the ledger)';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
