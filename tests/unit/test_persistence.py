"""Unit tests for the raw-SQL repositories using a mocked AsyncSession."""
import json
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.fm_common.errors import InternalError, UserNotFoundError
from src.fm_ledger.domain.models import NewTransaction
from src.fm_ledger.infrastructure.persistence import LedgerRepository
from src.fm_order.domain.models import Order
from src.fm_order.infrastructure.persistence import OrderRepository
from src.fm_withdrawal.infrastructure.persistence import WithdrawalRepository


def _db_returning(*, one: Any = None, many: list[Any] | None = None) -> AsyncMock:
    db = AsyncMock()
    result_mock = MagicMock()
    result_mock.fetchone.return_value = one
    result_mock.fetchall.return_value = many or []
    db.execute.return_value = result_mock
    return db


def _order_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", "ORD-1")
    row.service_id = "SVC-1"
    row.buyer_id = "buyer"
    row.seller_id = "seller"
    row.package_type = "basic"
    row.price = Decimal("30.00")
    row.commission = Decimal("6.00")
    row.delivery_days = 3
    row.status = kwargs.get("status", "created")
    row.due_date = datetime(2026, 1, 4, tzinfo=UTC)
    row.delivery_url = None
    row.delivery_notes = None
    row.revision_count = kwargs.get("revision_count", 0)
    row.max_revisions = 2
    row.completed_at = kwargs.get("completed_at")
    row.created_at = datetime(2026, 1, 1, tzinfo=UTC)
    row.updated_at = datetime(2026, 1, 1, tzinfo=UTC)
    return row


def _balance_row(balance: str = "70.00") -> MagicMock:
    row = MagicMock()
    row.id = "user-1"
    row.balance = Decimal(balance)
    row.pending_balance = Decimal("0.00")
    row.held_balance = Decimal("0.00")
    row.total_earnings = Decimal("0.00")
    return row


def _tx_row(metadata: Any) -> MagicMock:
    row = MagicMock()
    row.id = 7
    row.user_id = "user-1"
    row.order_id = None
    row.type = "deposit"
    row.amount = Decimal("10.00")
    row.balance_before = Decimal("0.00")
    row.balance_after = Decimal("10.00")
    row.description = None
    row.metadata = metadata
    row.created_at = datetime(2026, 1, 1, tzinfo=UTC)
    return row


def _order() -> Order:
    return Order(
        id="ORD-1",
        service_id="SVC-1",
        buyer_id="buyer",
        seller_id="seller",
        package_type="basic",
        price=Decimal("30.00"),
        commission=Decimal("6.00"),
        delivery_days=3,
        status="created",
        due_date=datetime(2026, 1, 4, tzinfo=UTC),
    )


class TestOrderRepository:
    async def test_save_maps_returned_row(self) -> None:
        db = _db_returning(one=_order_row())
        saved = await OrderRepository().save(db, _order())
        assert saved.created_at is not None
        params = db.execute.await_args.args[1]
        assert params["price"] == Decimal("30.00")
        assert params["commission"] == Decimal("6.00")

    async def test_save_without_row_is_internal_error(self) -> None:
        with pytest.raises(InternalError):
            await OrderRepository().save(_db_returning(one=None), _order())

    async def test_transition_lost_race_returns_none(self) -> None:
        db = _db_returning(one=None)
        assert await OrderRepository().transition(db, "ORD-1", "created", "in_progress") is None
        params = db.execute.await_args.args[1]
        assert params["expected"] == "created"
        assert params["revision_delta"] == 0

    async def test_transition_to_revision_increments(self) -> None:
        db = _db_returning(one=_order_row(status="revision", revision_count=1))
        order = await OrderRepository().transition(
            db, "ORD-1", "in_progress", "revision", increment_revision=True
        )
        assert order is not None
        assert order.revision_count == 1
        assert db.execute.await_args.args[1]["revision_delta"] == 1

    async def test_list_by_party(self) -> None:
        db = _db_returning(many=[_order_row(id="ORD-2"), _order_row(id="ORD-1")])
        orders = await OrderRepository().list_by_party(db, "buyer", None, 21, None)
        assert [o.id for o in orders] == ["ORD-2", "ORD-1"]


class TestLedgerRepository:
    async def test_lock_balance_missing_user(self) -> None:
        assert await LedgerRepository().lock_balance(_db_returning(one=None), "ghost") is None

    async def test_lock_balances_passes_ids_in_one_statement(self) -> None:
        db = _db_returning(many=[_balance_row("70.00")])
        [bal] = await LedgerRepository().lock_balances(db, ["user-1", "user-2"])
        assert bal.user_id == "user-1"
        sql, params = db.execute.await_args.args
        assert params == {"user_ids": ["user-1", "user-2"]}
        assert "ORDER BY id" in str(sql)
        assert "FOR UPDATE" in str(sql)

    async def test_adjust_balance_returns_new_values(self) -> None:
        db = _db_returning(one=_balance_row("70.00"))
        bal = await LedgerRepository().adjust_balance(db, "user-1", available=Decimal("-30.00"))
        assert bal.balance == Decimal("70.00")
        params = db.execute.await_args.args[1]
        assert params["available"] == Decimal("-30.00")
        assert params["pending"] == Decimal("0.00")

    async def test_adjust_balance_unknown_user(self) -> None:
        with pytest.raises(UserNotFoundError):
            await LedgerRepository().adjust_balance(_db_returning(one=None), "ghost")

    async def test_append_transaction_serialises_metadata(self) -> None:
        db = _db_returning(one=_tx_row({"credited_by": "admin"}))
        entry = NewTransaction(
            user_id="user-1",
            type="deposit",
            amount=Decimal("10.00"),
            balance_before=Decimal("0.00"),
            balance_after=Decimal("10.00"),
            metadata={"credited_by": "admin"},
        )
        tx = await LedgerRepository().append_transaction(db, entry)
        assert tx.id == 7
        assert json.loads(db.execute.await_args.args[1]["metadata"]) == {"credited_by": "admin"}

    async def test_metadata_returned_as_text_is_decoded(self) -> None:
        db = _db_returning(many=[_tx_row('{"withdrawal_id": "WDR-1"}')])
        [tx] = await LedgerRepository().list_user_history(db, "user-1")
        assert tx.metadata == {"withdrawal_id": "WDR-1"}


class TestWithdrawalRepository:
    async def test_process_already_processed_returns_none(self) -> None:
        db = _db_returning(one=None)
        result = await WithdrawalRepository().process(
            db, "WDR-1", "approved", "admin-1", datetime(2026, 1, 2, tzinfo=UTC)
        )
        assert result is None
        assert db.execute.await_args.args[1]["target"] == "approved"

    async def test_get_by_id_maps_row(self) -> None:
        row = MagicMock()
        row.id = "WDR-1"
        row.user_id = "user-1"
        row.amount = Decimal("50.00")
        row.status = "pending"
        row.payment_method = "paypal"
        row.payment_details = "user-1@example.com"
        row.held = False
        row.processed_by = None
        row.processed_at = None
        row.created_at = datetime(2026, 1, 1, tzinfo=UTC)
        req = await WithdrawalRepository().get_by_id(_db_returning(one=row), "WDR-1")
        assert req is not None
        assert req.amount == Decimal("50.00")
        assert req.held is False
