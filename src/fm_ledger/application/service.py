"""Ledger application layer.

LedgerService is what the order, withdrawal and admin services call to move
money. It never commits: it runs inside the caller's unit of work, so the
balance update and its audit row either both persist or neither does.

AccountApplicationService is the read side (balance, transaction history).
"""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_common.errors import InsufficientBalanceError, UserNotFoundError
from src.fm_common.money import ZERO
from src.fm_common.pagination import cursor_decode, cursor_encode
from src.fm_ledger.application.schemas import (
    BalanceResponse,
    TransactionItem,
    TransactionListResponse,
)
from src.fm_ledger.domain.models import NewTransaction, Transaction, UserBalance
from src.fm_ledger.domain.repository import LedgerRepositoryProtocol
from src.fm_ledger.infrastructure.persistence import LedgerRepository

logger = logging.getLogger(__name__)


class LedgerService:
    def __init__(self, repo: LedgerRepositoryProtocol | None = None) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()

    async def require_available(
        self, db: AsyncSession, user_id: str, amount: Decimal
    ) -> UserBalance:
        """Lock the user's row and check balance >= amount before any debit."""
        locked = await self._repo.lock_balance(db, user_id)
        if locked is None:
            raise UserNotFoundError(user_id)
        if locked.balance < amount:
            raise InsufficientBalanceError(amount, locked.balance)
        return locked

    async def lock_users(self, db: AsyncSession, *user_ids: str) -> list[UserBalance]:
        """Lock every party of a multi-user posting before touching any of them.

        Rows are locked in ascending id order whatever order the caller names
        them in, so concurrent postings over the same users cannot deadlock.
        """
        ids = sorted(set(user_ids))
        locked = await self._repo.lock_balances(db, ids)
        found = {b.user_id for b in locked}
        for user_id in ids:
            if user_id not in found:
                raise UserNotFoundError(user_id)
        return locked

    async def post(
        self,
        db: AsyncSession,
        user_id: str,
        tx_type: str,
        amount: Decimal,
        *,
        pending: Decimal = ZERO,
        earnings: Decimal = ZERO,
        held: Decimal = ZERO,
        order_id: str | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> tuple[UserBalance, Transaction]:
        """Move `amount` (signed) on the available balance and record it.

        balance_before comes from the locked row, balance_after from the
        RETURNING of the update itself, so the audit row matches the stored
        value at write time even when other deltas ride along.
        """
        before = await self._repo.lock_balance(db, user_id)
        if before is None:
            raise UserNotFoundError(user_id)
        after = await self._repo.adjust_balance(
            db, user_id, available=amount, pending=pending, earnings=earnings, held=held
        )
        tx = await self._repo.append_transaction(
            db,
            NewTransaction(
                user_id=user_id,
                type=tx_type,
                amount=amount,
                balance_before=before.balance,
                balance_after=after.balance,
                order_id=order_id,
                description=description,
                metadata=metadata or {},
            ),
        )
        logger.debug(
            "Posted %s %s for user=%s (%s -> %s)",
            tx_type, amount, user_id, before.balance, after.balance,
        )
        return after, tx

    async def shift(
        self,
        db: AsyncSession,
        user_id: str,
        *,
        pending: Decimal = ZERO,
        held: Decimal = ZERO,
    ) -> UserBalance:
        """Move money on the non-available fields only; no audit row."""
        return await self._repo.adjust_balance(db, user_id, pending=pending, held=held)

    async def get_balance(self, db: AsyncSession, user_id: str) -> UserBalance:
        bal = await self._repo.get_balance(db, user_id)
        if bal is None:
            raise UserNotFoundError(user_id)
        return bal


class AccountApplicationService:
    def __init__(self, repo: LedgerRepositoryProtocol | None = None) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()

    async def get_balance(self, db: AsyncSession, user_id: str) -> BalanceResponse:
        bal = await self._repo.get_balance(db, user_id)
        if bal is None:
            raise UserNotFoundError(user_id)
        return BalanceResponse.from_domain(bal)

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
        tx_type: str | None,
    ) -> TransactionListResponse:
        last_id = cursor_decode(cursor)
        cursor_id = last_id if isinstance(last_id, int) else None
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_transactions(
            db, user_id, cursor_id, limit + 1, tx_type
        )
        has_more = len(entries) > limit
        page = entries[:limit]

        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return TransactionListResponse(
            items=[TransactionItem.from_domain(tx) for tx in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )
