"""DisputeRepository: raw SQL on disputes (order_id is UNIQUE)."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_common.errors import InternalError
from src.fm_dispute.domain.models import Dispute

_SELECT_COLUMNS = """
    id, order_id, complainant_id, respondent_id, reason, status,
    refund_amount, resolution, created_at, resolved_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO disputes (id, order_id, complainant_id, respondent_id, reason, status)
    VALUES (:id, :order_id, :complainant_id, :respondent_id, :reason, :status)
    RETURNING {_SELECT_COLUMNS}
""")

_GET_BY_ID_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM disputes WHERE id = :id")

_GET_BY_ORDER_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM disputes WHERE order_id = :order_id")

_LIST_BY_PARTY_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM disputes
    WHERE (complainant_id = :user_id OR respondent_id = :user_id)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_LIST_ALL_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM disputes
    WHERE (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_dispute(row: Any) -> Dispute:
    return Dispute(
        id=row.id,
        order_id=row.order_id,
        complainant_id=row.complainant_id,
        respondent_id=row.respondent_id,
        reason=row.reason,
        status=row.status,
        refund_amount=row.refund_amount,
        resolution=row.resolution,
        created_at=row.created_at,
        resolved_at=row.resolved_at,
    )


class DisputeRepository:
    async def save(self, db: AsyncSession, dispute: Dispute) -> Dispute:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": dispute.id,
                "order_id": dispute.order_id,
                "complainant_id": dispute.complainant_id,
                "respondent_id": dispute.respondent_id,
                "reason": dispute.reason,
                "status": dispute.status,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Dispute insert returned no rows")
        return _row_to_dispute(row)

    async def get_by_id(self, db: AsyncSession, dispute_id: str) -> Dispute | None:
        row = (await db.execute(_GET_BY_ID_SQL, {"id": dispute_id})).fetchone()
        return _row_to_dispute(row) if row else None

    async def get_by_order(self, db: AsyncSession, order_id: str) -> Dispute | None:
        row = (await db.execute(_GET_BY_ORDER_SQL, {"order_id": order_id})).fetchone()
        return _row_to_dispute(row) if row else None

    async def list_by_party(
        self, db: AsyncSession, user_id: str, limit: int, cursor_id: str | None
    ) -> list[Dispute]:
        result = await db.execute(
            _LIST_BY_PARTY_SQL, {"user_id": user_id, "cursor_id": cursor_id, "limit": limit}
        )
        return [_row_to_dispute(row) for row in result.fetchall()]

    async def list_all(
        self, db: AsyncSession, status: str | None, limit: int, cursor_id: str | None
    ) -> list[Dispute]:
        result = await db.execute(
            _LIST_ALL_SQL, {"status": status, "cursor_id": cursor_id, "limit": limit}
        )
        return [_row_to_dispute(row) for row in result.fetchall()]
