"""End-to-end escrow flow against PostgreSQL: fund, order, complete, audit."""

import pytest
from httpx import AsyncClient

from tests.integration.helpers import Actor, balance_of, deposit, register_and_login

pytestmark = [pytest.mark.integration, pytest.mark.asyncio(loop_scope="session")]


async def _service(client: AsyncClient, seller: Actor, price: str = "30.00") -> str:
    resp = await client.post(
        "/api/v1/services",
        json={"title": "Logo design", "packages": {"basic": {"price": price, "delivery_days": 3}}},
        headers=seller.headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["id"]


async def _order(client: AsyncClient, buyer: Actor, service_id: str) -> dict:
    resp = await client.post(
        "/api/v1/orders", json={"service_id": service_id}, headers=buyer.headers
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


class TestEscrow:
    async def test_order_lifecycle_moves_money(self, client: AsyncClient) -> None:
        admin = await register_and_login(client, "admin")
        seller = await register_and_login(client, "seller")
        buyer = await register_and_login(client)
        await client.put(
            "/api/v1/admin/settings/commission-rate",
            json={"commission_rate": "20"},
            headers=admin.headers,
        )
        await deposit(client, admin, buyer, "100.00")
        service_id = await _service(client, seller)

        order = await _order(client, buyer, service_id)
        assert order["price"] == "30.00"
        assert order["commission"] == "6.00"
        assert (await balance_of(client, buyer))["balance"] == "70.00"
        assert (await balance_of(client, seller))["pending_balance"] == "24.00"

        for target in ("in_progress", "completed"):
            resp = await client.patch(
                f"/api/v1/orders/{order['id']}/status",
                json={"status": target},
                headers=seller.headers if target == "in_progress" else buyer.headers,
            )
            assert resp.status_code == 200, resp.text

        seller_bal = await balance_of(client, seller)
        assert seller_bal["balance"] == "24.00"
        assert seller_bal["pending_balance"] == "0.00"
        assert seller_bal["total_earnings"] == "24.00"

        resp = await client.get(
            "/api/v1/account/transactions", params={"type": "payment"}, headers=buyer.headers
        )
        [payment] = resp.json()["data"]["items"]
        assert payment["amount"] == "-30.00"
        assert payment["balance_before"] == "100.00"
        assert payment["balance_after"] == "70.00"

        resp = await client.get("/api/v1/admin/ledger/verify", headers=admin.headers)
        assert resp.json()["data"]["ok"] is True

    async def test_insufficient_balance_leaves_no_order(self, client: AsyncClient) -> None:
        seller = await register_and_login(client, "seller")
        buyer = await register_and_login(client)
        service_id = await _service(client, seller)

        resp = await client.post(
            "/api/v1/orders", json={"service_id": service_id}, headers=buyer.headers
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 2001

        resp = await client.get("/api/v1/orders", headers=buyer.headers)
        assert resp.json()["data"]["items"] == []

    async def test_terminal_order_rejects_transitions(self, client: AsyncClient) -> None:
        admin = await register_and_login(client, "admin")
        seller = await register_and_login(client, "seller")
        buyer = await register_and_login(client)
        await deposit(client, admin, buyer, "30.00")
        order = await _order(client, buyer, await _service(client, seller))

        resp = await client.patch(
            f"/api/v1/orders/{order['id']}/status",
            json={"status": "cancelled"},
            headers=buyer.headers,
        )
        assert resp.status_code == 200
        resp = await client.patch(
            f"/api/v1/orders/{order['id']}/status",
            json={"status": "completed"},
            headers=buyer.headers,
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == 4003


class TestWithdrawal:
    async def test_processed_request_is_final(self, client: AsyncClient) -> None:
        admin = await register_and_login(client, "admin")
        user = await register_and_login(client)
        await deposit(client, admin, user, "50.00")

        resp = await client.post(
            "/api/v1/withdrawals",
            json={
                "amount": "20.00",
                "payment_method": "paypal",
                "payment_details": "seller@example.com",
            },
            headers=user.headers,
        )
        withdrawal_id = resp.json()["data"]["id"]

        resp = await client.post(
            f"/api/v1/admin/withdrawals/{withdrawal_id}/approve", headers=admin.headers
        )
        assert resp.status_code == 200
        assert (await balance_of(client, user))["balance"] == "30.00"

        resp = await client.post(
            f"/api/v1/admin/withdrawals/{withdrawal_id}/reject", headers=admin.headers
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == 5002
        assert (await balance_of(client, user))["balance"] == "30.00"


class TestDispute:
    async def test_open_then_resolution_refused(self, client: AsyncClient) -> None:
        admin = await register_and_login(client, "admin")
        seller = await register_and_login(client, "seller")
        buyer = await register_and_login(client)
        await deposit(client, admin, buyer, "30.00")
        order = await _order(client, buyer, await _service(client, seller))

        resp = await client.post(
            "/api/v1/disputes",
            json={"order_id": order["id"], "reason": "No response from seller"},
            headers=buyer.headers,
        )
        assert resp.status_code == 201
        dispute_id = resp.json()["data"]["id"]

        resp = await client.post(
            f"/api/v1/admin/disputes/{dispute_id}/resolve", headers=admin.headers
        )
        assert resp.status_code == 501
        assert resp.json()["code"] == 6004
        assert (await balance_of(client, buyer))["balance"] == "0.00"
