"""Order lifecycle: creation, status transitions and their balance effects.

Every mutating method is one unit of work. Money moves only through
LedgerService, which locks the user row it records a snapshot for.
Units of work that touch several users lock the buyer and seller rows
together, in id order, before any balance moves. The platform row is
always touched last so it is held for the shortest time.

Balance effects per transition:
  create     buyer   payment  -price
             seller  pending  +(price - commission)
             platform pending +commission
  completed  seller  earnings +(price - commission), pending released
             platform commission +commission, pending released
  cancelled  nothing, unless REFUND_ON_CANCEL reverses all three credits
  revision / dispute / in_progress: status only
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.fm_catalog.domain.packages import resolve_package
from src.fm_catalog.domain.repository import ServiceRepositoryProtocol, SettingRepositoryProtocol
from src.fm_catalog.infrastructure.persistence import ServiceRepository
from src.fm_catalog.infrastructure.settings_repository import SettingRepository
from src.fm_common.datetime_utils import due_date_from, utc_now
from src.fm_common.enums import OrderStatus, TransactionType
from src.fm_common.errors import (
    InvalidPackageError,
    InvalidStatusTransitionError,
    OrderAccessForbiddenError,
    OrderNotFoundError,
    RevisionLimitExceededError,
    ServiceNotActiveError,
    ServiceNotFoundError,
)
from src.fm_common.id_generator import new_order_id
from src.fm_common.money import ZERO, calculate_commission
from src.fm_common.pagination import cursor_decode, cursor_encode
from src.fm_common.unit_of_work import unit_of_work
from src.fm_ledger.application.service import LedgerService
from src.fm_order.application.schemas import (
    CreateOrderRequest,
    DeliverOrderRequest,
    OrderListResponse,
    OrderResponse,
)
from src.fm_order.domain.models import Order
from src.fm_order.domain.repository import OrderRepositoryProtocol
from src.fm_order.domain.state_machine import allowed_targets, can_transition
from src.fm_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


def _build_list_response(orders: list[Order], limit: int) -> OrderListResponse:
    has_more = len(orders) > limit
    page = orders[:limit]
    return OrderListResponse(
        items=[OrderResponse.from_domain(o) for o in page],
        next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
        has_more=has_more,
    )


def _string_cursor(cursor: str | None) -> str | None:
    last_id = cursor_decode(cursor)
    return last_id if isinstance(last_id, str) else None


class OrderApplicationService:
    def __init__(
        self,
        order_repo: OrderRepositoryProtocol | None = None,
        service_repo: ServiceRepositoryProtocol | None = None,
        setting_repo: SettingRepositoryProtocol | None = None,
        ledger: LedgerService | None = None,
    ) -> None:
        self._orders: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._services: ServiceRepositoryProtocol = service_repo or ServiceRepository()
        self._settings: SettingRepositoryProtocol = setting_repo or SettingRepository()
        self._ledger = ledger or LedgerService()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_order(
        self, db: AsyncSession, buyer_id: str, req: CreateOrderRequest
    ) -> OrderResponse:
        async with unit_of_work(db):
            service = await self._services.get_by_id(db, req.service_id)
            if service is None:
                raise ServiceNotFoundError(req.service_id)
            if not service.is_active:
                raise ServiceNotActiveError(req.service_id)
            try:
                package = resolve_package(service, req.package_type.value)
            except ValueError as exc:
                raise InvalidPackageError(str(exc)) from exc

            rate = await self._settings.get_commission_rate(db)
            commission = calculate_commission(package.price, rate)

            await self._ledger.lock_users(db, buyer_id, service.seller_id)
            # Rejected here, before the order row or any balance is touched.
            await self._ledger.require_available(db, buyer_id, package.price)

            now = utc_now()
            order = await self._orders.save(
                db,
                Order(
                    id=new_order_id(),
                    service_id=service.id,
                    buyer_id=buyer_id,
                    seller_id=service.seller_id,
                    package_type=package.type,
                    price=package.price,
                    commission=commission,
                    delivery_days=package.delivery_days,
                    status=OrderStatus.CREATED.value,
                    due_date=due_date_from(now, package.delivery_days),
                    created_at=now,
                ),
            )

            await self._ledger.post(
                db,
                buyer_id,
                TransactionType.PAYMENT.value,
                -order.price,
                order_id=order.id,
                description=f"Payment for order {order.id}",
            )
            await self._ledger.shift(db, order.seller_id, pending=order.seller_amount)
            if order.commission > ZERO:
                await self._ledger.shift(
                    db, settings.PLATFORM_ACCOUNT_ID, pending=order.commission
                )

        logger.info(
            "Order %s created: buyer=%s seller=%s price=%s commission=%s",
            order.id, buyer_id, order.seller_id, order.price, order.commission,
        )
        return OrderResponse.from_domain(order)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def start_work(self, db: AsyncSession, order_id: str, user_id: str) -> OrderResponse:
        """Seller acknowledges the order: created -> in_progress."""
        async with unit_of_work(db):
            order = await self._lock_for_party(db, order_id, user_id)
            if user_id != order.seller_id:
                raise OrderAccessForbiddenError(order_id)
            if order.status != OrderStatus.CREATED.value:
                raise self._bad_transition(order, OrderStatus.IN_PROGRESS.value)
            updated = await self._transition(db, order, OrderStatus.IN_PROGRESS.value)
        logger.info("Order %s started by seller=%s", order_id, user_id)
        return OrderResponse.from_domain(updated)

    async def update_status(
        self, db: AsyncSession, order_id: str, user_id: str, target: OrderStatus
    ) -> OrderResponse:
        async with unit_of_work(db):
            order = await self._lock_for_party(db, order_id, user_id)
            if (
                target == OrderStatus.IN_PROGRESS
                and order.status == OrderStatus.CREATED.value
                and user_id != order.seller_id
            ):
                raise OrderAccessForbiddenError(order_id)
            if not can_transition(order.status, target.value):
                raise self._bad_transition(order, target.value)
            if target == OrderStatus.REVISION and order.revision_count >= order.max_revisions:
                raise RevisionLimitExceededError(order_id, order.max_revisions)

            updated = await self._transition(db, order, target.value)
            if target == OrderStatus.COMPLETED:
                await self._release_funds(db, updated)
            elif target == OrderStatus.CANCELLED and settings.REFUND_ON_CANCEL:
                await self._refund_buyer(db, updated)

        logger.info(
            "Order %s moved %s -> %s by user=%s", order_id, order.status, target.value, user_id
        )
        return OrderResponse.from_domain(updated)

    async def deliver(
        self, db: AsyncSession, order_id: str, user_id: str, req: DeliverOrderRequest
    ) -> OrderResponse:
        """Record the seller's submitted work. Status is left unchanged."""
        async with unit_of_work(db):
            order = await self._orders.get_by_id(db, order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            if user_id != order.seller_id:
                raise OrderAccessForbiddenError(order_id)
            updated = await self._orders.update_delivery(
                db, order_id, req.delivery_url, req.delivery_notes
            )
            if updated is None:
                raise OrderNotFoundError(order_id)
        return OrderResponse.from_domain(updated)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_order(
        self, db: AsyncSession, order_id: str, user_id: str, is_admin: bool = False
    ) -> OrderResponse:
        order = await self._orders.get_by_id(db, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        if not is_admin and not order.is_party(user_id):
            raise OrderAccessForbiddenError(order_id)
        return OrderResponse.from_domain(order)

    async def list_orders(
        self,
        db: AsyncSession,
        user_id: str,
        status: str | None,
        limit: int,
        cursor: str | None,
    ) -> OrderListResponse:
        orders = await self._orders.list_by_party(
            db, user_id, status, limit + 1, _string_cursor(cursor)
        )
        return _build_list_response(orders, limit)

    async def list_all_orders(
        self, db: AsyncSession, status: str | None, limit: int, cursor: str | None
    ) -> OrderListResponse:
        orders = await self._orders.list_all(db, status, limit + 1, _string_cursor(cursor))
        return _build_list_response(orders, limit)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _lock_for_party(self, db: AsyncSession, order_id: str, user_id: str) -> Order:
        order = await self._orders.lock_by_id(db, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        if not order.is_party(user_id):
            raise OrderAccessForbiddenError(order_id)
        return order

    async def _transition(self, db: AsyncSession, order: Order, target: str) -> Order:
        updated = await self._orders.transition(
            db,
            order.id,
            order.status,
            target,
            completed_at=utc_now() if target == OrderStatus.COMPLETED.value else None,
            increment_revision=target == OrderStatus.REVISION.value,
        )
        if updated is None:
            # another request moved the order first
            raise self._bad_transition(order, target)
        return updated

    @staticmethod
    def _bad_transition(order: Order, target: str) -> InvalidStatusTransitionError:
        allowed = sorted(s.value for s in allowed_targets(order.status))
        return InvalidStatusTransitionError(order.id, order.status, target, allowed)

    async def _release_funds(self, db: AsyncSession, order: Order) -> None:
        amount = order.seller_amount
        await self._ledger.post(
            db,
            order.seller_id,
            TransactionType.EARNINGS.value,
            amount,
            pending=-amount,
            earnings=amount,
            order_id=order.id,
            description=f"Earnings for order {order.id}",
        )
        if order.commission > ZERO:
            await self._ledger.post(
                db,
                settings.PLATFORM_ACCOUNT_ID,
                TransactionType.COMMISSION.value,
                order.commission,
                pending=-order.commission,
                order_id=order.id,
                description=f"Commission for order {order.id}",
            )

    async def _refund_buyer(self, db: AsyncSession, order: Order) -> None:
        await self._ledger.lock_users(db, order.buyer_id, order.seller_id)
        await self._ledger.post(
            db,
            order.buyer_id,
            TransactionType.REFUND.value,
            order.price,
            order_id=order.id,
            description=f"Refund for cancelled order {order.id}",
        )
        await self._ledger.shift(db, order.seller_id, pending=-order.seller_amount)
        if order.commission > ZERO:
            await self._ledger.shift(
                db, settings.PLATFORM_ACCOUNT_ID, pending=-order.commission
            )
