"""Disputes: open, read, list. Resolution has no balance policy and is refused."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_common.enums import DisputeStatus, OrderStatus
from src.fm_common.errors import (
    DisputeAccessForbiddenError,
    DisputeExistsError,
    DisputeNotFoundError,
    DisputeResolutionNotImplementedError,
    InvalidStatusTransitionError,
    OrderAccessForbiddenError,
    OrderNotFoundError,
)
from src.fm_common.id_generator import new_dispute_id
from src.fm_common.pagination import cursor_decode, cursor_encode
from src.fm_common.unit_of_work import unit_of_work
from src.fm_dispute.application.schemas import (
    DisputeListResponse,
    DisputeResponse,
    OpenDisputeRequest,
)
from src.fm_dispute.domain.models import Dispute
from src.fm_dispute.domain.repository import DisputeRepositoryProtocol
from src.fm_dispute.infrastructure.persistence import DisputeRepository
from src.fm_order.domain.repository import OrderRepositoryProtocol
from src.fm_order.domain.state_machine import is_terminal
from src.fm_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


def _build_list_response(items: list[Dispute], limit: int) -> DisputeListResponse:
    has_more = len(items) > limit
    page = items[:limit]
    return DisputeListResponse(
        items=[DisputeResponse.from_domain(d) for d in page],
        next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
        has_more=has_more,
    )


def _string_cursor(cursor: str | None) -> str | None:
    last_id = cursor_decode(cursor)
    return last_id if isinstance(last_id, str) else None


class DisputeApplicationService:
    def __init__(
        self,
        repo: DisputeRepositoryProtocol | None = None,
        order_repo: OrderRepositoryProtocol | None = None,
    ) -> None:
        self._repo: DisputeRepositoryProtocol = repo or DisputeRepository()
        self._orders: OrderRepositoryProtocol = order_repo or OrderRepository()

    async def open_dispute(
        self, db: AsyncSession, user_id: str, req: OpenDisputeRequest
    ) -> DisputeResponse:
        async with unit_of_work(db):
            order = await self._orders.lock_by_id(db, req.order_id)
            if order is None:
                raise OrderNotFoundError(req.order_id)
            if not order.is_party(user_id):
                raise OrderAccessForbiddenError(req.order_id)
            if is_terminal(order.status):
                raise InvalidStatusTransitionError(
                    order.id, order.status, OrderStatus.DISPUTE.value, allowed=()
                )
            if await self._repo.get_by_order(db, order.id) is not None:
                raise DisputeExistsError(order.id)

            respondent = order.seller_id if user_id == order.buyer_id else order.buyer_id
            dispute = await self._repo.save(
                db,
                Dispute(
                    id=new_dispute_id(),
                    order_id=order.id,
                    complainant_id=user_id,
                    respondent_id=respondent,
                    reason=req.reason,
                    status=DisputeStatus.OPEN.value,
                ),
            )
            # The order may already be in dispute via a status update
            if order.status != OrderStatus.DISPUTE.value:
                moved = await self._orders.transition(
                    db, order.id, order.status, OrderStatus.DISPUTE.value
                )
                if moved is None:
                    raise InvalidStatusTransitionError(
                        order.id, order.status, OrderStatus.DISPUTE.value
                    )
        logger.info("Dispute %s opened on order %s by user=%s", dispute.id, order.id, user_id)
        return DisputeResponse.from_domain(dispute)

    async def get_dispute(
        self, db: AsyncSession, dispute_id: str, user_id: str, is_admin: bool = False
    ) -> DisputeResponse:
        dispute = await self._repo.get_by_id(db, dispute_id)
        if dispute is None:
            raise DisputeNotFoundError(dispute_id)
        if not is_admin and not dispute.is_party(user_id):
            raise DisputeAccessForbiddenError(dispute_id)
        return DisputeResponse.from_domain(dispute)

    async def list_mine(
        self, db: AsyncSession, user_id: str, limit: int, cursor: str | None
    ) -> DisputeListResponse:
        items = await self._repo.list_by_party(db, user_id, limit + 1, _string_cursor(cursor))
        return _build_list_response(items, limit)

    async def list_all(
        self, db: AsyncSession, status: str | None, limit: int, cursor: str | None
    ) -> DisputeListResponse:
        items = await self._repo.list_all(db, status, limit + 1, _string_cursor(cursor))
        return _build_list_response(items, limit)

    async def resolve(self, db: AsyncSession, dispute_id: str) -> None:
        """Always refused: no refund policy exists, so nothing is changed."""
        if await self._repo.get_by_id(db, dispute_id) is None:
            raise DisputeNotFoundError(dispute_id)
        raise DisputeResolutionNotImplementedError()
