"""LedgerRepository: concrete implementation of LedgerRepositoryProtocol.

Balance mutations are single in-place UPDATE ... RETURNING statements
(balance = balance + :delta), so concurrent increments never lose updates.
Snapshots recorded in transactions come from lock_balance (FOR UPDATE) and
the RETURNING row, both inside the caller's unit of work.

Multi-user units of work lock every party row up front with lock_balances,
which takes the row locks in ascending id order so two transactions over
the same users always queue instead of deadlocking.

Transaction ownership: the CALLER (application service) commits or rolls
back; see src/fm_common/unit_of_work.py.
"""

import json
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_common.errors import InternalError, UserNotFoundError
from src.fm_common.money import ZERO
from src.fm_ledger.domain.models import NewTransaction, Transaction, UserBalance

# ---------------------------------------------------------------------------
# SQL: users balance fields
# ---------------------------------------------------------------------------

_BALANCE_COLUMNS = "id, balance, pending_balance, held_balance, total_earnings"

_GET_BALANCE_SQL = text(f"""
    SELECT {_BALANCE_COLUMNS}
    FROM users
    WHERE id = :user_id
""")

_LOCK_BALANCE_SQL = text(f"""
    SELECT {_BALANCE_COLUMNS}
    FROM users
    WHERE id = :user_id
    FOR UPDATE
""")

_LOCK_BALANCES_SQL = text(f"""
    SELECT {_BALANCE_COLUMNS}
    FROM users
    WHERE id = ANY(:user_ids)
    ORDER BY id
    FOR UPDATE
""")

_ADJUST_BALANCE_SQL = text(f"""
    UPDATE users
    SET balance         = balance         + :available,
        pending_balance = pending_balance + :pending,
        total_earnings  = total_earnings  + :earnings,
        held_balance    = held_balance    + :held,
        updated_at      = NOW()
    WHERE id = :user_id
    RETURNING {_BALANCE_COLUMNS}
""")

_LIST_BALANCES_SQL = text(f"""
    SELECT {_BALANCE_COLUMNS}
    FROM users
    ORDER BY id
""")

# ---------------------------------------------------------------------------
# SQL: transactions (append-only)
# ---------------------------------------------------------------------------

_TX_COLUMNS = """
    id, user_id, order_id, type, amount, balance_before, balance_after,
    description, metadata, created_at
"""

_INSERT_TX_SQL = text(f"""
    INSERT INTO transactions
        (user_id, order_id, type, amount, balance_before, balance_after,
         description, metadata)
    VALUES
        (:user_id, :order_id, :type, :amount, :balance_before, :balance_after,
         :description, CAST(:metadata AS JSONB))
    RETURNING {_TX_COLUMNS}
""")

_LIST_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < CAST(:cursor_id AS BIGINT))
      AND (CAST(:tx_type AS TEXT) IS NULL OR type = CAST(:tx_type AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")

_USER_HISTORY_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE user_id = :user_id
    ORDER BY id ASC
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------

def _row_to_balance(row: Any) -> UserBalance:
    return UserBalance(
        user_id=row.id,
        balance=row.balance,
        pending_balance=row.pending_balance,
        held_balance=row.held_balance,
        total_earnings=row.total_earnings,
    )


def _row_to_transaction(row: Any) -> Transaction:
    metadata = row.metadata
    if isinstance(metadata, str):
        metadata = json.loads(metadata)
    return Transaction(
        id=row.id,
        user_id=row.user_id,
        order_id=row.order_id,
        type=row.type,
        amount=row.amount,
        balance_before=row.balance_before,
        balance_after=row.balance_after,
        description=row.description,
        metadata=metadata,
        created_at=row.created_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class LedgerRepository:
    """Concrete repository: every balance write is one atomic statement."""

    async def get_balance(self, db: AsyncSession, user_id: str) -> UserBalance | None:
        row = (await db.execute(_GET_BALANCE_SQL, {"user_id": user_id})).fetchone()
        return _row_to_balance(row) if row else None

    async def lock_balance(self, db: AsyncSession, user_id: str) -> UserBalance | None:
        row = (await db.execute(_LOCK_BALANCE_SQL, {"user_id": user_id})).fetchone()
        return _row_to_balance(row) if row else None

    async def lock_balances(self, db: AsyncSession, user_ids: list[str]) -> list[UserBalance]:
        result = await db.execute(_LOCK_BALANCES_SQL, {"user_ids": user_ids})
        return [_row_to_balance(r) for r in result.fetchall()]

    async def adjust_balance(
        self,
        db: AsyncSession,
        user_id: str,
        *,
        available: Decimal = ZERO,
        pending: Decimal = ZERO,
        earnings: Decimal = ZERO,
        held: Decimal = ZERO,
    ) -> UserBalance:
        result = await db.execute(
            _ADJUST_BALANCE_SQL,
            {
                "user_id": user_id,
                "available": available,
                "pending": pending,
                "earnings": earnings,
                "held": held,
            },
        )
        row = result.fetchone()
        if row is None:
            raise UserNotFoundError(user_id)
        return _row_to_balance(row)

    async def append_transaction(
        self, db: AsyncSession, entry: NewTransaction
    ) -> Transaction:
        result = await db.execute(
            _INSERT_TX_SQL,
            {
                "user_id": entry.user_id,
                "order_id": entry.order_id,
                "type": entry.type,
                "amount": entry.amount,
                "balance_before": entry.balance_before,
                "balance_after": entry.balance_after,
                "description": entry.description,
                "metadata": json.dumps(entry.metadata),
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Transaction insert returned no rows")
        return _row_to_transaction(row)

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        tx_type: str | None,
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_TX_SQL,
            {
                "user_id": user_id,
                "cursor_id": cursor_id,
                "tx_type": tx_type,
                "limit": limit,
            },
        )
        return [_row_to_transaction(row) for row in result.fetchall()]

    async def list_user_history(self, db: AsyncSession, user_id: str) -> list[Transaction]:
        result = await db.execute(_USER_HISTORY_SQL, {"user_id": user_id})
        return [_row_to_transaction(row) for row in result.fetchall()]

    async def list_balances(self, db: AsyncSession) -> list[UserBalance]:
        result = await db.execute(_LIST_BALANCES_SQL)
        return [_row_to_balance(row) for row in result.fetchall()]
