"""Admin REST API. Every route requires the admin role."""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_admin.application.service import AdminService
from src.fm_common.database import get_db_session
from src.fm_common.enums import DisputeStatus, OrderStatus, WithdrawalStatus
from src.fm_common.response import ApiResponse, success_response
from src.fm_dispute.application.service import DisputeApplicationService
from src.fm_gateway.api.router import get_request_id
from src.fm_gateway.auth.dependencies import require_admin
from src.fm_gateway.user.db_models import UserModel
from src.fm_order.application.service import OrderApplicationService
from src.fm_withdrawal.application.service import WithdrawalApplicationService

router = APIRouter(prefix="/admin", tags=["admin"])

_service = AdminService()
_orders = OrderApplicationService()
_withdrawals = WithdrawalApplicationService()
_disputes = DisputeApplicationService()


class DepositRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    note: str | None = Field(None, max_length=500)


class CommissionRateRequest(BaseModel):
    commission_rate: Decimal = Field(..., ge=0, le=100, max_digits=5, decimal_places=2)


# --- users / balances ---


@router.post("/users/{user_id}/ban")
async def toggle_ban(
    user_id: str,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.toggle_ban(db, user_id)
    return success_response(result, get_request_id(request))


@router.post("/users/{user_id}/deposit")
async def deposit(
    user_id: str,
    body: DepositRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.deposit(db, user_id, body.amount, str(admin.id), body.note)
    return success_response(result, get_request_id(request))


# --- settings ---


@router.get("/settings/commission-rate")
async def get_commission_rate(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.get_commission_rate(db)
    return success_response(result, get_request_id(request))


@router.put("/settings/commission-rate")
async def set_commission_rate(
    body: CommissionRateRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.set_commission_rate(db, body.commission_rate)
    return success_response(result, get_request_id(request))


# --- orders ---


@router.get("/orders")
async def list_orders(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    order_status: OrderStatus | None = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    data = await _orders.list_all_orders(
        db, order_status.value if order_status else None, limit, cursor
    )
    return success_response(data.model_dump(), get_request_id(request))


# --- withdrawals ---


@router.get("/withdrawals")
async def list_withdrawals(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    withdrawal_status: WithdrawalStatus | None = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    data = await _withdrawals.list_all(
        db, withdrawal_status.value if withdrawal_status else None, limit, cursor
    )
    return success_response(data.model_dump(), get_request_id(request))


@router.post("/withdrawals/{withdrawal_id}/approve")
async def approve_withdrawal(
    withdrawal_id: str,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _withdrawals.approve(db, withdrawal_id, str(admin.id))
    return success_response(data.model_dump(), get_request_id(request))


@router.post("/withdrawals/{withdrawal_id}/reject")
async def reject_withdrawal(
    withdrawal_id: str,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _withdrawals.reject(db, withdrawal_id, str(admin.id))
    return success_response(data.model_dump(), get_request_id(request))


# --- disputes ---


@router.get("/disputes")
async def list_disputes(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    dispute_status: DisputeStatus | None = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    data = await _disputes.list_all(
        db, dispute_status.value if dispute_status else None, limit, cursor
    )
    return success_response(data.model_dump(), get_request_id(request))


@router.post("/disputes/{dispute_id}/resolve")
async def resolve_dispute(
    dispute_id: str,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    await _disputes.resolve(db, dispute_id)  # always raises (501)
    return success_response()


# --- audit ---


@router.get("/ledger/verify")
async def verify_ledger(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.verify_ledger(db)
    return success_response(result, get_request_id(request))
