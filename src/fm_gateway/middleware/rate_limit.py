"""Fixed-window rate limiting backed by Redis.

Key pattern: "ratelimit:{client_ip}:{minute_window}", INCR + EXPIRE 60s.
The client IP is the socket peer. X-Forwarded-For is honoured only when the
peer is one of TRUSTED_PROXIES; the client is then the nearest hop that is
not itself a trusted proxy. /health is never limited.

If Redis is unreachable the request is let through and a warning logged:
rate limiting is an abuse guard, not part of the ledger's correctness.
"""

import logging
import time
from collections.abc import Awaitable, Callable, Collection

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from src.fm_common.errors import RateLimitError
from src.fm_common.redis_client import get_redis
from src.fm_common.response import error_response

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60
_EXEMPT_PATHS = frozenset({"/health"})


def client_ip(request: Request, trusted_proxies: Collection[str] = ()) -> str:
    peer = request.client.host if request.client else "unknown"
    forwarded = request.headers.get("x-forwarded-for")
    if not forwarded or peer not in trusted_proxies:
        return peer
    hops = [h.strip() for h in forwarded.split(",") if h.strip()]
    for hop in reversed(hops):
        if hop not in trusted_proxies:
            return hop
    return hops[0] if hops else peer


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        limit_per_minute: int,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        trusted_proxies: Collection[str] = (),
    ) -> None:
        super().__init__(app)
        self._limit = limit_per_minute
        self._redis_factory = redis_factory
        self._trusted_proxies = frozenset(trusted_proxies)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        window = int(time.time()) // _WINDOW_SECONDS
        key = f"ratelimit:{client_ip(request, self._trusted_proxies)}:{window}"
        try:
            redis = await self._redis_factory()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, _WINDOW_SECONDS)
        except RedisError:
            logger.warning("Rate limiter unavailable, letting request through")
            return await call_next(request)

        if count > self._limit:
            err = RateLimitError()
            resp = error_response(
                err.code, err.message, getattr(request.state, "request_id", None)
            )
            retry_after = _WINDOW_SECONDS - int(time.time()) % _WINDOW_SECONDS
            return JSONResponse(
                status_code=err.http_status,
                content=resp.model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
