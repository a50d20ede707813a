"""fm_dispute REST API: parties' side. Admin listing/resolution lives under /admin."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_common.database import get_db_session
from src.fm_common.response import ApiResponse, success_response
from src.fm_dispute.application.schemas import OpenDisputeRequest
from src.fm_dispute.application.service import DisputeApplicationService
from src.fm_gateway.api.router import get_request_id
from src.fm_gateway.auth.dependencies import get_current_user
from src.fm_gateway.user.db_models import UserModel

router = APIRouter(prefix="/disputes", tags=["disputes"])

_service = DisputeApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def open_dispute(
    body: OpenDisputeRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.open_dispute(db, str(current_user.id), body)
    return success_response(data.model_dump(), get_request_id(request))


@router.get("")
async def list_my_disputes(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
) -> ApiResponse:
    data = await _service.list_mine(db, str(current_user.id), limit, cursor)
    return success_response(data.model_dump(), get_request_id(request))


@router.get("/{dispute_id}")
async def get_dispute(
    dispute_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_dispute(
        db, dispute_id, str(current_user.id), current_user.is_admin
    )
    return success_response(data.model_dump(), get_request_id(request))
