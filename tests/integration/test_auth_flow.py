"""Integration tests for registration, login, refresh and the ban switch."""

import uuid

import pytest
from httpx import AsyncClient

from tests.integration.helpers import register_and_login

pytestmark = [pytest.mark.integration, pytest.mark.asyncio(loop_scope="session")]


def unique_user() -> dict[str, str]:
    uid = uuid.uuid4().hex[:8]
    return {
        "username": f"testuser_{uid}",
        "email": f"test_{uid}@example.com",
        "password": "TestPass1",
    }


class TestRegister:
    async def test_register_as_seller(self, client: AsyncClient) -> None:
        user = unique_user()
        resp = await client.post("/api/v1/auth/register", json={**user, "role": "seller"})
        assert resp.status_code == 201
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["role"] == "seller"

    async def test_cannot_self_register_as_admin(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/v1/auth/register", json={**unique_user(), "role": "admin"}
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 9004

    async def test_register_duplicate_username(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post(
            "/api/v1/auth/register",
            json={**user, "email": f"other_{uuid.uuid4().hex[:6]}@example.com"},
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == 1001


class TestLoginAndRefresh:
    async def test_wrong_password(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post(
            "/api/v1/auth/login",
            json={"username": user["username"], "password": "WrongPass1"},
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == 1003

    async def test_refresh_rejects_access_token(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        login = await client.post(
            "/api/v1/auth/login",
            json={"username": user["username"], "password": user["password"]},
        )
        resp = await client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": login.json()["data"]["access_token"]},
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == 1005


class TestBan:
    async def test_banned_user_is_locked_out(self, client: AsyncClient) -> None:
        admin = await register_and_login(client, "admin")
        user = await register_and_login(client)

        resp = await client.post(f"/api/v1/admin/users/{user.user_id}/ban", headers=admin.headers)
        assert resp.json()["data"]["is_banned"] is True

        resp = await client.get("/api/v1/account/balance", headers=user.headers)
        assert resp.status_code == 403
        assert resp.json()["code"] == 1004

        # toggles back
        resp = await client.post(f"/api/v1/admin/users/{user.user_id}/ban", headers=admin.headers)
        assert resp.json()["data"]["is_banned"] is False
