"""Ledger repository Protocol: the only sanctioned path to balance fields.

No other module issues UPDATEs against users.balance / pending_balance /
held_balance / total_earnings. Unit tests inject an in-memory fake that
conforms to this Protocol.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_common.money import ZERO
from src.fm_ledger.domain.models import NewTransaction, Transaction, UserBalance


class LedgerRepositoryProtocol(Protocol):
    async def get_balance(self, db: AsyncSession, user_id: str) -> UserBalance | None: ...

    async def lock_balance(self, db: AsyncSession, user_id: str) -> UserBalance | None:
        """SELECT ... FOR UPDATE: the row stays locked until the unit of work ends."""
        ...

    async def lock_balances(self, db: AsyncSession, user_ids: list[str]) -> list[UserBalance]:
        """Lock several rows in one statement, in ascending id order."""
        ...

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
        """Apply all deltas in one in-place UPDATE and return the new snapshot.

        Never refuses a debit: callers check sufficiency first.
        """
        ...

    async def append_transaction(
        self, db: AsyncSession, entry: NewTransaction
    ) -> Transaction: ...

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        tx_type: str | None,
    ) -> list[Transaction]: ...

    async def list_user_history(self, db: AsyncSession, user_id: str) -> list[Transaction]:
        """Every transaction of the user, oldest first (replay order)."""
        ...

    async def list_balances(self, db: AsyncSession) -> list[UserBalance]: ...
