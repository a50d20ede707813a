"""005: create transactions table

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE transactions (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL REFERENCES users(id),
            order_id        VARCHAR(64)     REFERENCES orders(id),
            type            VARCHAR(16)     NOT NULL,
            amount          NUMERIC(12, 2)  NOT NULL,
            balance_before  NUMERIC(12, 2)  NOT NULL,
            balance_after   NUMERIC(12, 2)  NOT NULL,
            description     TEXT,
            metadata        JSONB           NOT NULL DEFAULT '{}'::jsonb,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transactions_type CHECK (type IN
                ('deposit', 'payment', 'refund', 'withdrawal', 'commission', 'earnings')),
            CONSTRAINT ck_transactions_arithmetic
                CHECK (balance_before + amount = balance_after)
        );
    """)
    op.execute("CREATE INDEX idx_transactions_user ON transactions (user_id, id DESC);")
    op.execute("CREATE INDEX idx_transactions_order ON transactions (order_id);")
    # Append-only: rows are never updated or deleted
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_transactions_immutable()
        RETURNS TRIGGER AS $$
        BEGIN
            RAISE EXCEPTION 'transactions are append-only';
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER trg_transactions_immutable
            BEFORE UPDATE OR DELETE ON transactions
            FOR EACH ROW EXECUTE FUNCTION fn_transactions_immutable();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_transactions_immutable();")
