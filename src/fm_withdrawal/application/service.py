"""Withdrawal workflow: request (any user), approve / reject (admin).

Two modes, chosen per request at creation time and stored on the row:

  held = False  request only checks balance >= amount. Approval debits
                the balance with no re-check, so two pending requests
                can together overdraw the account.
  held = True   request moves the amount from balance to held_balance
                (withdrawal transaction). Approval consumes the hold,
                rejection returns it (refund transaction).
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.fm_common.datetime_utils import utc_now
from src.fm_common.enums import TransactionType, WithdrawalStatus
from src.fm_common.errors import (
    WithdrawalAlreadyProcessedError,
    WithdrawalNotFoundError,
)
from src.fm_common.id_generator import new_withdrawal_id
from src.fm_common.money import ZERO
from src.fm_common.pagination import cursor_decode, cursor_encode
from src.fm_common.unit_of_work import unit_of_work
from src.fm_ledger.application.service import LedgerService
from src.fm_withdrawal.application.schemas import (
    CreateWithdrawalRequest,
    ProcessWithdrawalResponse,
    WithdrawalListResponse,
    WithdrawalResponse,
)
from src.fm_withdrawal.domain.models import WithdrawalRequest
from src.fm_withdrawal.domain.repository import WithdrawalRepositoryProtocol
from src.fm_withdrawal.infrastructure.persistence import WithdrawalRepository

logger = logging.getLogger(__name__)


def _build_list_response(items: list[WithdrawalRequest], limit: int) -> WithdrawalListResponse:
    has_more = len(items) > limit
    page = items[:limit]
    return WithdrawalListResponse(
        items=[WithdrawalResponse.from_domain(w) for w in page],
        next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
        has_more=has_more,
    )


def _string_cursor(cursor: str | None) -> str | None:
    last_id = cursor_decode(cursor)
    return last_id if isinstance(last_id, str) else None


class WithdrawalApplicationService:
    def __init__(
        self,
        repo: WithdrawalRepositoryProtocol | None = None,
        ledger: LedgerService | None = None,
    ) -> None:
        self._repo: WithdrawalRepositoryProtocol = repo or WithdrawalRepository()
        self._ledger = ledger or LedgerService()

    async def request_withdrawal(
        self, db: AsyncSession, user_id: str, req: CreateWithdrawalRequest
    ) -> WithdrawalResponse:
        hold = settings.WITHDRAWAL_HOLD_ENABLED
        async with unit_of_work(db):
            await self._ledger.require_available(db, user_id, req.amount)
            saved = await self._repo.save(
                db,
                WithdrawalRequest(
                    id=new_withdrawal_id(),
                    user_id=user_id,
                    amount=req.amount,
                    status=WithdrawalStatus.PENDING.value,
                    payment_method=req.payment_method,
                    payment_details=req.payment_details,
                    held=hold,
                ),
            )
            if saved.held:
                await self._ledger.post(
                    db,
                    user_id,
                    TransactionType.WITHDRAWAL.value,
                    -saved.amount,
                    held=saved.amount,
                    description=f"Withdrawal {saved.id} reserved",
                    metadata={"withdrawal_id": saved.id},
                )
        logger.info(
            "Withdrawal %s requested: user=%s amount=%s held=%s",
            saved.id, user_id, saved.amount, saved.held,
        )
        return WithdrawalResponse.from_domain(saved)

    async def approve(
        self, db: AsyncSession, withdrawal_id: str, admin_id: str
    ) -> ProcessWithdrawalResponse:
        async with unit_of_work(db):
            processed = await self._process(
                db, withdrawal_id, WithdrawalStatus.APPROVED.value, admin_id
            )
            if processed.held:
                await self._ledger.shift(db, processed.user_id, held=-processed.amount)
            else:
                after, _ = await self._ledger.post(
                    db,
                    processed.user_id,
                    TransactionType.WITHDRAWAL.value,
                    -processed.amount,
                    description=f"Withdrawal {processed.id}",
                    metadata={"withdrawal_id": processed.id},
                )
                if after.balance < ZERO:
                    logger.warning(
                        "Withdrawal %s approval left user=%s with negative balance %s",
                        processed.id, processed.user_id, after.balance,
                    )
        logger.info(
            "Withdrawal %s approved by admin=%s amount=%s",
            withdrawal_id, admin_id, processed.amount,
        )
        return ProcessWithdrawalResponse(
            success=True, withdrawal=WithdrawalResponse.from_domain(processed)
        )

    async def reject(
        self, db: AsyncSession, withdrawal_id: str, admin_id: str
    ) -> ProcessWithdrawalResponse:
        async with unit_of_work(db):
            processed = await self._process(
                db, withdrawal_id, WithdrawalStatus.REJECTED.value, admin_id
            )
            if processed.held:
                await self._ledger.post(
                    db,
                    processed.user_id,
                    TransactionType.REFUND.value,
                    processed.amount,
                    held=-processed.amount,
                    description=f"Withdrawal {processed.id} rejected",
                    metadata={"withdrawal_id": processed.id},
                )
        logger.info("Withdrawal %s rejected by admin=%s", withdrawal_id, admin_id)
        return ProcessWithdrawalResponse(
            success=True, withdrawal=WithdrawalResponse.from_domain(processed)
        )

    async def get_withdrawal(
        self, db: AsyncSession, withdrawal_id: str, user_id: str, is_admin: bool = False
    ) -> WithdrawalResponse:
        req = await self._repo.get_by_id(db, withdrawal_id)
        # Someone else's request reads as absent
        if req is None or (not is_admin and req.user_id != user_id):
            raise WithdrawalNotFoundError(withdrawal_id)
        return WithdrawalResponse.from_domain(req)

    async def list_mine(
        self, db: AsyncSession, user_id: str, limit: int, cursor: str | None
    ) -> WithdrawalListResponse:
        items = await self._repo.list_by_user(db, user_id, limit + 1, _string_cursor(cursor))
        return _build_list_response(items, limit)

    async def list_all(
        self, db: AsyncSession, status: str | None, limit: int, cursor: str | None
    ) -> WithdrawalListResponse:
        items = await self._repo.list_all(db, status, limit + 1, _string_cursor(cursor))
        return _build_list_response(items, limit)

    async def _process(
        self, db: AsyncSession, withdrawal_id: str, target: str, admin_id: str
    ) -> WithdrawalRequest:
        existing = await self._repo.get_by_id(db, withdrawal_id)
        if existing is None:
            raise WithdrawalNotFoundError(withdrawal_id)
        processed = await self._repo.process(db, withdrawal_id, target, admin_id, utc_now())
        if processed is None:
            current = await self._repo.get_by_id(db, withdrawal_id)
            raise WithdrawalAlreadyProcessedError(
                withdrawal_id, current.status if current else existing.status
            )
        return processed
