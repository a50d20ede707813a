"""003: create services table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE services (
            id                      VARCHAR(64)     PRIMARY KEY DEFAULT gen_random_uuid()::text,
            seller_id               VARCHAR(64)     NOT NULL REFERENCES users(id),
            title                   VARCHAR(200)    NOT NULL,
            description             TEXT,
            basic_price             NUMERIC(12, 2)  NOT NULL,
            basic_delivery_days     INTEGER         NOT NULL,
            basic_description       TEXT,
            standard_price          NUMERIC(12, 2),
            standard_delivery_days  INTEGER,
            standard_description    TEXT,
            premium_price           NUMERIC(12, 2),
            premium_delivery_days   INTEGER,
            premium_description     TEXT,
            is_active               BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_services_basic_price CHECK (basic_price > 0),
            CONSTRAINT ck_services_basic_days CHECK (basic_delivery_days >= 1)
        );
    """)
    op.execute("CREATE INDEX idx_services_seller ON services (seller_id);")
    op.execute("""
        CREATE TRIGGER trg_services_updated_at
            BEFORE UPDATE ON services
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS services CASCADE;")
