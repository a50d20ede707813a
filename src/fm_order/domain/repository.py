"""OrderRepository Protocol: interface contract for persistence layer."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_order.domain.models import Order


class OrderRepositoryProtocol(Protocol):
    async def save(self, db: AsyncSession, order: Order) -> Order: ...

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None: ...

    async def lock_by_id(self, db: AsyncSession, order_id: str) -> Order | None: ...

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
        """Compare-and-set on status. None when the order is no longer in `expected`."""
        ...

    async def update_delivery(
        self,
        db: AsyncSession,
        order_id: str,
        delivery_url: str | None,
        delivery_notes: str | None,
    ) -> Order | None: ...

    async def list_by_party(
        self,
        db: AsyncSession,
        user_id: str,
        status: str | None,
        limit: int,
        cursor_id: str | None,
    ) -> list[Order]: ...

    async def list_all(
        self,
        db: AsyncSession,
        status: str | None,
        limit: int,
        cursor_id: str | None,
    ) -> list[Order]: ...
