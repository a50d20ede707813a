"""fm_catalog REST API: create/read services and edit their packages."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_catalog.application.schemas import CreateServiceRequest, PackagesIn
from src.fm_catalog.application.service import CatalogApplicationService
from src.fm_common.database import get_db_session
from src.fm_common.response import ApiResponse, success_response
from src.fm_gateway.api.router import get_request_id
from src.fm_gateway.auth.dependencies import get_current_user
from src.fm_gateway.user.db_models import UserModel

router = APIRouter(prefix="/services", tags=["services"])

_service = CatalogApplicationService()


class SetActiveRequest(BaseModel):
    is_active: bool


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_service(
    body: CreateServiceRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_service(db, str(current_user.id), current_user.role, body)
    return success_response(data.model_dump(), get_request_id(request))


@router.get("/{service_id}")
async def get_service(
    service_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_service(db, service_id)
    return success_response(data.model_dump(), get_request_id(request))


@router.put("/{service_id}/packages")
async def update_packages(
    service_id: str,
    body: PackagesIn,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_packages(db, service_id, str(current_user.id), body)
    return success_response(data.model_dump(), get_request_id(request))


@router.patch("/{service_id}/active")
async def set_active(
    service_id: str,
    body: SetActiveRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.set_active(db, service_id, str(current_user.id), body.is_active)
    return success_response(data.model_dump(), get_request_id(request))
