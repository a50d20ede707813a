"""Unit tests for the Redis fixed-window rate limiter."""

from unittest.mock import AsyncMock

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from src.fm_gateway.middleware.rate_limit import RateLimitMiddleware


def _app(redis: AsyncMock, limit: int = 2, trusted: tuple[str, ...] = ()) -> FastAPI:
    app = FastAPI()

    async def factory() -> AsyncMock:
        return redis

    app.add_middleware(
        RateLimitMiddleware,
        limit_per_minute=limit,
        redis_factory=factory,
        trusted_proxies=trusted,
    )

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"ok": "yes"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


async def _get(app: FastAPI, path: str, **headers: str):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        return await ac.get(path, headers=headers)


async def test_under_limit_passes_and_sets_expiry_once() -> None:
    redis = AsyncMock()
    redis.incr.return_value = 1
    resp = await _get(_app(redis), "/ping")

    assert resp.status_code == 200
    redis.expire.assert_awaited_once()


async def test_over_limit_returns_429_envelope() -> None:
    redis = AsyncMock()
    redis.incr.return_value = 3
    resp = await _get(_app(redis, limit=2), "/ping")

    assert resp.status_code == 429
    body = resp.json()
    assert body["code"] == 9001
    assert body["data"] is None
    assert int(resp.headers["retry-after"]) > 0


async def test_key_uses_forwarded_client_ip_behind_trusted_proxy() -> None:
    redis = AsyncMock()
    redis.incr.return_value = 1
    # the test transport connects from 127.0.0.1
    app = _app(redis, trusted=("127.0.0.1", "10.0.0.1"))
    await _get(app, "/ping", **{"x-forwarded-for": "198.51.100.9, 203.0.113.7, 10.0.0.1"})

    key = redis.incr.await_args.args[0]
    assert key.startswith("ratelimit:203.0.113.7:")


async def test_forwarded_header_from_untrusted_peer_is_ignored() -> None:
    redis = AsyncMock()
    redis.incr.return_value = 1
    for spoofed in ("203.0.113.7", "198.51.100.1"):
        await _get(_app(redis), "/ping", **{"x-forwarded-for": spoofed})

    keys = [call.args[0] for call in redis.incr.await_args_list]
    assert all(k.startswith("ratelimit:127.0.0.1:") for k in keys)
    assert len(keys) == 2


async def test_health_is_exempt() -> None:
    redis = AsyncMock()
    resp = await _get(_app(redis), "/health")

    assert resp.status_code == 200
    redis.incr.assert_not_awaited()


async def test_redis_outage_fails_open() -> None:
    redis = AsyncMock()
    redis.incr.side_effect = RedisConnectionError("down")
    resp = await _get(_app(redis), "/ping")

    assert resp.status_code == 200
