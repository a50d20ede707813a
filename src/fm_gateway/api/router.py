"""Auth API router: register, login, refresh, me.

request_id is read from request.state (injected by RequestLogMiddleware) so
every envelope, including error envelopes, can be correlated with the log.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.fm_common.database import get_db_session
from src.fm_common.response import ApiResponse, success_response
from src.fm_gateway.auth.dependencies import get_current_user
from src.fm_gateway.user.db_models import UserModel
from src.fm_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    UserInfo,
)
from src.fm_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()

_TOKEN_TTL_SECONDS = settings.JWT_EXPIRE_MINUTES * 60


def get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


def _user_info(user: UserModel) -> UserInfo:
    return UserInfo(
        user_id=str(user.id), username=user.username, email=user.email, role=user.role
    )


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def register(
    request: Request,
    body: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user = await _service.register(body.username, body.email, body.password, body.role, db)
    data = RegisterResponse(
        **_user_info(user).model_dump(),
        created_at=user.created_at.isoformat(),
    )
    resp = success_response(data.model_dump(), get_request_id(request))
    resp.message = "User registered successfully"
    return resp


@router.post("/login", response_model=ApiResponse)
async def login(
    request: Request,
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user, access_token, refresh_token = await _service.login(body.username, body.password, db)
    data = LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=_TOKEN_TTL_SECONDS,
        user=_user_info(user),
    )
    resp = success_response(data.model_dump(), get_request_id(request))
    resp.message = "Login successful"
    return resp


@router.post("/refresh", response_model=ApiResponse)
async def refresh_token(request: Request, body: RefreshRequest) -> ApiResponse:
    data = RefreshResponse(
        access_token=await _service.refresh(body.refresh_token),
        expires_in=_TOKEN_TTL_SECONDS,
    )
    resp = success_response(data.model_dump(), get_request_id(request))
    resp.message = "Token refreshed"
    return resp


@router.get("/me", response_model=ApiResponse)
async def me(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
) -> ApiResponse:
    """Role is read from the database on every request, never from the token."""
    return success_response(_user_info(current_user).model_dump(), get_request_id(request))
