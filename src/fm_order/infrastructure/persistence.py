"""OrderRepository: raw SQL persistence implementation."""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_common.errors import InternalError
from src.fm_order.domain.models import Order

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, service_id, buyer_id, seller_id, package_type,
    price, commission, delivery_days, status, due_date,
    delivery_url, delivery_notes, revision_count, max_revisions,
    completed_at, created_at, updated_at
"""

_INSERT_ORDER_SQL = text(f"""
    INSERT INTO orders (id, service_id, buyer_id, seller_id, package_type,
        price, commission, delivery_days, status, due_date, max_revisions)
    VALUES (:id, :service_id, :buyer_id, :seller_id, :package_type,
        :price, :commission, :delivery_days, :status, :due_date, :max_revisions)
    RETURNING {_SELECT_COLUMNS}
""")

_GET_ORDER_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders WHERE id = :id
""")

_LOCK_ORDER_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders WHERE id = :id
    FOR UPDATE
""")

# price and commission are never in a SET clause: both are frozen at insert.
_TRANSITION_SQL = text(f"""
    UPDATE orders
    SET status = :target,
        completed_at = COALESCE(CAST(:completed_at AS TIMESTAMPTZ), completed_at),
        revision_count = revision_count + :revision_delta,
        updated_at = NOW()
    WHERE id = :id AND status = :expected
    RETURNING {_SELECT_COLUMNS}
""")

_UPDATE_DELIVERY_SQL = text(f"""
    UPDATE orders
    SET delivery_url = :delivery_url,
        delivery_notes = :delivery_notes,
        updated_at = NOW()
    WHERE id = :id
    RETURNING {_SELECT_COLUMNS}
""")

_LIST_BY_PARTY_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE (buyer_id = :user_id OR seller_id = :user_id)
      AND (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_LIST_ALL_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object."""
    return Order(
        id=row.id,
        service_id=row.service_id,
        buyer_id=row.buyer_id,
        seller_id=row.seller_id,
        package_type=row.package_type,
        price=row.price,
        commission=row.commission,
        delivery_days=row.delivery_days,
        status=row.status,
        due_date=row.due_date,
        delivery_url=row.delivery_url,
        delivery_notes=row.delivery_notes,
        revision_count=row.revision_count,
        max_revisions=row.max_revisions,
        completed_at=row.completed_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def save(self, db: AsyncSession, order: Order) -> Order:
        result = await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "service_id": order.service_id,
                "buyer_id": order.buyer_id,
                "seller_id": order.seller_id,
                "package_type": order.package_type,
                "price": order.price,
                "commission": order.commission,
                "delivery_days": order.delivery_days,
                "status": order.status,
                "due_date": order.due_date,
                "max_revisions": order.max_revisions,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Order insert returned no rows")
        return _row_to_order(row)

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None:
        result = await db.execute(_GET_ORDER_BY_ID_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def lock_by_id(self, db: AsyncSession, order_id: str) -> Order | None:
        result = await db.execute(_LOCK_ORDER_BY_ID_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def transition(
        self,
        db: AsyncSession,
        order_id: str,
        expected: str,
        target: str,
        *,
        completed_at: datetime | None = None,
        increment_revision: bool = False,
    ) -> Order | None:
        result = await db.execute(
            _TRANSITION_SQL,
            {
                "id": order_id,
                "expected": expected,
                "target": target,
                "completed_at": completed_at,
                "revision_delta": 1 if increment_revision else 0,
            },
        )
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def update_delivery(
        self,
        db: AsyncSession,
        order_id: str,
        delivery_url: str | None,
        delivery_notes: str | None,
    ) -> Order | None:
        result = await db.execute(
            _UPDATE_DELIVERY_SQL,
            {"id": order_id, "delivery_url": delivery_url, "delivery_notes": delivery_notes},
        )
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def list_by_party(
        self,
        db: AsyncSession,
        user_id: str,
        status: str | None,
        limit: int,
        cursor_id: str | None,
    ) -> list[Order]:
        result = await db.execute(
            _LIST_BY_PARTY_SQL,
            {"user_id": user_id, "status": status, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_order(row) for row in result.fetchall()]

    async def list_all(
        self,
        db: AsyncSession,
        status: str | None,
        limit: int,
        cursor_id: str | None,
    ) -> list[Order]:
        result = await db.execute(
            _LIST_ALL_SQL,
            {"status": status, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_order(row) for row in result.fetchall()]
