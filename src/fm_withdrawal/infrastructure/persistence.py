"""WithdrawalRepository: raw SQL on withdrawal_requests."""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_common.errors import InternalError
from src.fm_withdrawal.domain.models import WithdrawalRequest

_SELECT_COLUMNS = """
    id, user_id, amount, status, payment_method, payment_details,
    held, processed_by, processed_at, created_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO withdrawal_requests
        (id, user_id, amount, status, payment_method, payment_details, held)
    VALUES
        (:id, :user_id, :amount, :status, :payment_method, :payment_details, :held)
    RETURNING {_SELECT_COLUMNS}
""")

_GET_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM withdrawal_requests WHERE id = :id
""")

# Only a pending request can be processed; terminal states are final.
_PROCESS_SQL = text(f"""
    UPDATE withdrawal_requests
    SET status = :target,
        processed_by = :processed_by,
        processed_at = :processed_at
    WHERE id = :id AND status = 'pending'
    RETURNING {_SELECT_COLUMNS}
""")

_LIST_BY_USER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM withdrawal_requests
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_LIST_ALL_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM withdrawal_requests
    WHERE (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_withdrawal(row: Any) -> WithdrawalRequest:
    return WithdrawalRequest(
        id=row.id,
        user_id=row.user_id,
        amount=row.amount,
        status=row.status,
        payment_method=row.payment_method,
        payment_details=row.payment_details,
        held=row.held,
        processed_by=row.processed_by,
        processed_at=row.processed_at,
        created_at=row.created_at,
    )


class WithdrawalRepository:
    async def save(self, db: AsyncSession, req: WithdrawalRequest) -> WithdrawalRequest:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": req.id,
                "user_id": req.user_id,
                "amount": req.amount,
                "status": req.status,
                "payment_method": req.payment_method,
                "payment_details": req.payment_details,
                "held": req.held,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Withdrawal insert returned no rows")
        return _row_to_withdrawal(row)

    async def get_by_id(self, db: AsyncSession, withdrawal_id: str) -> WithdrawalRequest | None:
        row = (await db.execute(_GET_BY_ID_SQL, {"id": withdrawal_id})).fetchone()
        return _row_to_withdrawal(row) if row else None

    async def process(
        self,
        db: AsyncSession,
        withdrawal_id: str,
        target: str,
        processed_by: str,
        processed_at: datetime,
    ) -> WithdrawalRequest | None:
        result = await db.execute(
            _PROCESS_SQL,
            {
                "id": withdrawal_id,
                "target": target,
                "processed_by": processed_by,
                "processed_at": processed_at,
            },
        )
        row = result.fetchone()
        return _row_to_withdrawal(row) if row else None

    async def list_by_user(
        self, db: AsyncSession, user_id: str, limit: int, cursor_id: str | None
    ) -> list[WithdrawalRequest]:
        result = await db.execute(
            _LIST_BY_USER_SQL, {"user_id": user_id, "cursor_id": cursor_id, "limit": limit}
        )
        return [_row_to_withdrawal(row) for row in result.fetchall()]

    async def list_all(
        self, db: AsyncSession, status: str | None, limit: int, cursor_id: str | None
    ) -> list[WithdrawalRequest]:
        result = await db.execute(
            _LIST_ALL_SQL, {"status": status, "cursor_id": cursor_id, "limit": limit}
        )
        return [_row_to_withdrawal(row) for row in result.fetchall()]
