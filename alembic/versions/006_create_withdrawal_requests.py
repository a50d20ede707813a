"""006: create withdrawal_requests table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE withdrawal_requests (
            id              VARCHAR(64)     PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL REFERENCES users(id),
            amount          NUMERIC(12, 2)  NOT NULL,
            status          VARCHAR(16)     NOT NULL DEFAULT 'pending',
            payment_method  VARCHAR(50)     NOT NULL,
            payment_details TEXT            NOT NULL,
            held            BOOLEAN         NOT NULL DEFAULT FALSE,
            processed_by    VARCHAR(64)     REFERENCES users(id),
            processed_at    TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_withdrawals_amount CHECK (amount > 0),
            CONSTRAINT ck_withdrawals_status CHECK (status IN ('pending', 'approved', 'rejected'))
        );
    """)
    op.execute("CREATE INDEX idx_withdrawals_user ON withdrawal_requests (user_id, id DESC);")
    op.execute("CREATE INDEX idx_withdrawals_status ON withdrawal_requests (status, id DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS withdrawal_requests CASCADE;")
