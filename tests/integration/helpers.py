"""Actors and shortcuts shared by the integration flows."""

import uuid
from dataclasses import dataclass

from httpx import AsyncClient
from sqlalchemy import text

from src.fm_common.database import async_session_factory


@dataclass
class Actor:
    user_id: str
    username: str
    headers: dict[str, str]


async def register_and_login(client: AsyncClient, role: str = "client") -> Actor:
    uid = uuid.uuid4().hex[:8]
    creds = {
        "username": f"{role}_{uid}",
        "email": f"{role}_{uid}@example.com",
        "password": "TestPass1",
    }
    reg = await client.post(
        "/api/v1/auth/register", json={**creds, "role": "client" if role == "admin" else role}
    )
    user_id = reg.json()["data"]["user_id"]
    if role == "admin":
        # admin is never self-assigned through the API
        async with async_session_factory() as session:
            await session.execute(
                text("UPDATE users SET role = 'admin' WHERE id = :id"), {"id": user_id}
            )
            await session.commit()
    login = await client.post(
        "/api/v1/auth/login",
        json={"username": creds["username"], "password": creds["password"]},
    )
    token = login.json()["data"]["access_token"]
    return Actor(user_id, creds["username"], {"Authorization": f"Bearer {token}"})


async def deposit(client: AsyncClient, admin: Actor, user: Actor, amount: str) -> None:
    resp = await client.post(
        f"/api/v1/admin/users/{user.user_id}/deposit",
        json={"amount": amount},
        headers=admin.headers,
    )
    assert resp.status_code == 200, resp.text


async def balance_of(client: AsyncClient, user: Actor) -> dict[str, str]:
    resp = await client.get("/api/v1/account/balance", headers=user.headers)
    return resp.json()["data"]
