"""WithdrawalRepository Protocol."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_withdrawal.domain.models import WithdrawalRequest


class WithdrawalRepositoryProtocol(Protocol):
    async def save(self, db: AsyncSession, req: WithdrawalRequest) -> WithdrawalRequest: ...

    async def get_by_id(self, db: AsyncSession, withdrawal_id: str) -> WithdrawalRequest | None: ...

    async def process(
        self,
        db: AsyncSession,
        withdrawal_id: str,
        target: str,
        processed_by: str,
        processed_at: datetime,
    ) -> WithdrawalRequest | None:
        """pending -> target, compare-and-set. None when the request is not pending."""
        ...

    async def list_by_user(
        self, db: AsyncSession, user_id: str, limit: int, cursor_id: str | None
    ) -> list[WithdrawalRequest]: ...

    async def list_all(
        self, db: AsyncSession, status: str | None, limit: int, cursor_id: str | None
    ) -> list[WithdrawalRequest]: ...
