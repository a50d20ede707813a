"""004: create orders table

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id              VARCHAR(64)     PRIMARY KEY,
            service_id      VARCHAR(64)     NOT NULL REFERENCES services(id),
            buyer_id        VARCHAR(64)     NOT NULL REFERENCES users(id),
            seller_id       VARCHAR(64)     NOT NULL REFERENCES users(id),
            package_type    VARCHAR(16)     NOT NULL,
            price           NUMERIC(12, 2)  NOT NULL,
            commission      NUMERIC(12, 2)  NOT NULL,
            delivery_days   INTEGER         NOT NULL,
            status          VARCHAR(16)     NOT NULL DEFAULT 'created',
            due_date        TIMESTAMPTZ     NOT NULL,
            delivery_url    TEXT,
            delivery_notes  TEXT,
            revision_count  INTEGER         NOT NULL DEFAULT 0,
            max_revisions   INTEGER         NOT NULL DEFAULT 2,
            completed_at    TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_package_type
                CHECK (package_type IN ('basic', 'standard', 'premium')),
            CONSTRAINT ck_orders_status CHECK (status IN
                ('created', 'in_progress', 'revision', 'completed', 'cancelled', 'dispute')),
            CONSTRAINT ck_orders_price CHECK (price > 0),
            CONSTRAINT ck_orders_commission CHECK (commission >= 0 AND commission <= price),
            CONSTRAINT ck_orders_revisions CHECK (revision_count <= max_revisions)
        );
    """)
    op.execute("CREATE INDEX idx_orders_buyer ON orders (buyer_id, id DESC);")
    op.execute("CREATE INDEX idx_orders_seller ON orders (seller_id, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
