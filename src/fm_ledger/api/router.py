"""fm_ledger REST API: caller's own balance and transaction history."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_common.database import get_db_session
from src.fm_common.enums import TransactionType
from src.fm_common.response import ApiResponse, success_response
from src.fm_gateway.api.router import get_request_id
from src.fm_gateway.auth.dependencies import get_current_user
from src.fm_gateway.user.db_models import UserModel
from src.fm_ledger.application.service import AccountApplicationService

router = APIRouter(prefix="/account", tags=["account"])

_service = AccountApplicationService()


@router.get("/balance")
async def get_balance(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(db, str(current_user.id))
    return success_response(data.model_dump(), get_request_id(request))


@router.get("/transactions")
async def list_transactions(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    tx_type: TransactionType | None = Query(None, alias="type", description="Filter by type"),
) -> ApiResponse:
    data = await _service.list_transactions(
        db,
        str(current_user.id),
        cursor,
        limit,
        tx_type.value if tx_type else None,
    )
    return success_response(data.model_dump(), get_request_id(request))
