"""009: seed platform account and default settings

Revision ID: 009
Revises: 008
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "009"
down_revision: Union[str, None] = "008"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Platform commission account. '!' is not a bcrypt hash, so nobody can log in as it.
    op.execute("""
        INSERT INTO users (id, username, email, password_hash, role)
        VALUES ('PLATFORM', 'platform', 'platform@localhost', '!', 'client');
    """)
    op.execute("INSERT INTO settings (key, value) VALUES ('commission_rate', '20');")


def downgrade() -> None:
    op.execute("DELETE FROM settings WHERE key = 'commission_rate';")
    op.execute("DELETE FROM users WHERE id = 'PLATFORM';")
