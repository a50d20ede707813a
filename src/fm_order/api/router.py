"""fm_order REST API."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_common.database import get_db_session
from src.fm_common.enums import OrderStatus
from src.fm_common.response import ApiResponse, success_response
from src.fm_gateway.api.router import get_request_id
from src.fm_gateway.auth.dependencies import get_current_user
from src.fm_gateway.user.db_models import UserModel
from src.fm_order.application.schemas import (
    CreateOrderRequest,
    DeliverOrderRequest,
    UpdateStatusRequest,
)
from src.fm_order.application.service import OrderApplicationService

router = APIRouter(prefix="/orders", tags=["orders"])

_service = OrderApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    body: CreateOrderRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_order(db, str(current_user.id), body)
    return success_response(data.model_dump(), get_request_id(request))


@router.get("")
async def list_orders(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    order_status: OrderStatus | None = Query(None, alias="status", description="Filter by status"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
) -> ApiResponse:
    data = await _service.list_orders(
        db,
        str(current_user.id),
        order_status.value if order_status else None,
        limit,
        cursor,
    )
    return success_response(data.model_dump(), get_request_id(request))


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_order(db, order_id, str(current_user.id), current_user.is_admin)
    return success_response(data.model_dump(), get_request_id(request))


@router.post("/{order_id}/start")
async def start_work(
    order_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.start_work(db, order_id, str(current_user.id))
    return success_response(data.model_dump(), get_request_id(request))


@router.patch("/{order_id}/status")
async def update_status(
    order_id: str,
    body: UpdateStatusRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_status(db, order_id, str(current_user.id), body.status)
    return success_response(data.model_dump(), get_request_id(request))


@router.post("/{order_id}/deliver")
async def deliver_order(
    order_id: str,
    body: DeliverOrderRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.deliver(db, order_id, str(current_user.id), body)
    return success_response(data.model_dump(), get_request_id(request))
