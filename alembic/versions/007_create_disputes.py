"""007: create disputes table

Revision ID: 007
Revises: 006
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE disputes (
            id              VARCHAR(64)     PRIMARY KEY,
            order_id        VARCHAR(64)     NOT NULL REFERENCES orders(id),
            complainant_id  VARCHAR(64)     NOT NULL REFERENCES users(id),
            respondent_id   VARCHAR(64)     NOT NULL REFERENCES users(id),
            reason          TEXT            NOT NULL,
            status          VARCHAR(16)     NOT NULL DEFAULT 'open',
            refund_amount   NUMERIC(12, 2),
            resolution      TEXT,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            resolved_at     TIMESTAMPTZ,
            CONSTRAINT uq_disputes_order UNIQUE (order_id),
            CONSTRAINT ck_disputes_status CHECK (status IN ('open', 'in_review', 'resolved'))
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS disputes CASCADE;")
