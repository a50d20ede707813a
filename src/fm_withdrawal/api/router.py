"""fm_withdrawal REST API: the requester's side. Approval lives under /admin."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_common.database import get_db_session
from src.fm_common.response import ApiResponse, success_response
from src.fm_gateway.api.router import get_request_id
from src.fm_gateway.auth.dependencies import get_current_user
from src.fm_gateway.user.db_models import UserModel
from src.fm_withdrawal.application.schemas import CreateWithdrawalRequest
from src.fm_withdrawal.application.service import WithdrawalApplicationService

router = APIRouter(prefix="/withdrawals", tags=["withdrawals"])

_service = WithdrawalApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def request_withdrawal(
    body: CreateWithdrawalRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.request_withdrawal(db, str(current_user.id), body)
    return success_response(data.model_dump(), get_request_id(request))


@router.get("")
async def list_my_withdrawals(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
) -> ApiResponse:
    data = await _service.list_mine(db, str(current_user.id), limit, cursor)
    return success_response(data.model_dump(), get_request_id(request))


@router.get("/{withdrawal_id}")
async def get_withdrawal(
    withdrawal_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_withdrawal(
        db, withdrawal_id, str(current_user.id), current_user.is_admin
    )
    return success_response(data.model_dump(), get_request_id(request))
