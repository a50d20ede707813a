"""DisputeRepository Protocol."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_dispute.domain.models import Dispute


class DisputeRepositoryProtocol(Protocol):
    async def save(self, db: AsyncSession, dispute: Dispute) -> Dispute: ...

    async def get_by_id(self, db: AsyncSession, dispute_id: str) -> Dispute | None: ...

    async def get_by_order(self, db: AsyncSession, order_id: str) -> Dispute | None: ...

    async def list_by_party(
        self, db: AsyncSession, user_id: str, limit: int, cursor_id: str | None
    ) -> list[Dispute]: ...

    async def list_all(
        self, db: AsyncSession, status: str | None, limit: int, cursor_id: str | None
    ) -> list[Dispute]: ...
