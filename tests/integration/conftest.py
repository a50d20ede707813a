"""Integration-test fixtures (PostgreSQL required; run `alembic upgrade head` first).

All integration tests share a single event loop so the module-level
SQLAlchemy engine pool, created at import time, stays valid for the session.
"""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client; keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
