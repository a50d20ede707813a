"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config.settings import settings
from src.fm_admin.api.router import router as admin_router
from src.fm_catalog.api.router import router as catalog_router
from src.fm_common.database import engine
from src.fm_common.errors import REQUEST_VALIDATION_CODE, AppError, StorageError
from src.fm_common.redis_client import close_redis, get_redis
from src.fm_common.response import error_response
from src.fm_dispute.api.router import router as dispute_router
from src.fm_gateway.api.router import get_request_id
from src.fm_gateway.api.router import router as auth_router
from src.fm_gateway.middleware.rate_limit import RateLimitMiddleware
from src.fm_gateway.middleware.request_log import RequestLogMiddleware
from src.fm_ledger.api.router import router as account_router
from src.fm_order.api.router import router as order_router
from src.fm_withdrawal.api.router import router as withdrawal_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB (+ Redis when rate limiting). Shutdown: dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    if settings.RATE_LIMIT_ENABLED:
        await get_redis()
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

# Starlette runs the last added middleware first: rate limiting sits inside
# the request log so throttled requests are still logged.
if settings.RATE_LIMIT_ENABLED:
    app.add_middleware(
        RateLimitMiddleware,
        limit_per_minute=settings.RATE_LIMIT_PER_MINUTE,
        trusted_proxies=settings.TRUSTED_PROXIES,
    )
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, get_request_id(request))
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database failures outside a unit of work (read paths) get the same 9003 envelope."""
    logger.error(
        "Storage failure on %s %s: %s", request.method, request.url.path, type(exc).__name__
    )
    err = StorageError()
    resp = error_response(err.code, err.message, get_request_id(request))
    return JSONResponse(status_code=err.http_status, content=resp.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(p) for p in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'invalid request')}" if location else "Invalid request"
    resp = error_response(REQUEST_VALIDATION_CODE, message, get_request_id(request))
    return JSONResponse(status_code=422, content=resp.model_dump())


app.include_router(auth_router, prefix="/api/v1")
app.include_router(account_router, prefix="/api/v1")
app.include_router(catalog_router, prefix="/api/v1")
app.include_router(order_router, prefix="/api/v1")
app.include_router(withdrawal_router, prefix="/api/v1")
app.include_router(dispute_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
