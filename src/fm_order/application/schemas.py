"""Pydantic schemas for fm_order API."""

from pydantic import BaseModel, Field

from src.fm_common.datetime_utils import isoformat_or_none
from src.fm_common.enums import OrderStatus, PackageType
from src.fm_common.money import money_str
from src.fm_order.domain.models import Order


class CreateOrderRequest(BaseModel):
    service_id: str = Field(..., min_length=1, max_length=64)
    package_type: PackageType = PackageType.BASIC


class UpdateStatusRequest(BaseModel):
    status: OrderStatus


class DeliverOrderRequest(BaseModel):
    delivery_url: str | None = Field(None, max_length=2000)
    delivery_notes: str | None = Field(None, max_length=5000)


class OrderResponse(BaseModel):
    id: str
    service_id: str
    buyer_id: str
    seller_id: str
    package_type: str
    price: str
    commission: str
    delivery_days: int
    status: str
    due_date: str | None
    delivery_url: str | None
    delivery_notes: str | None
    revision_count: int
    max_revisions: int
    completed_at: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            service_id=order.service_id,
            buyer_id=order.buyer_id,
            seller_id=order.seller_id,
            package_type=order.package_type,
            price=money_str(order.price),
            commission=money_str(order.commission),
            delivery_days=order.delivery_days,
            status=order.status,
            due_date=isoformat_or_none(order.due_date),
            delivery_url=order.delivery_url,
            delivery_notes=order.delivery_notes,
            revision_count=order.revision_count,
            max_revisions=order.max_revisions,
            completed_at=isoformat_or_none(order.completed_at),
            created_at=isoformat_or_none(order.created_at),
        )


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    next_cursor: str | None
    has_more: bool
