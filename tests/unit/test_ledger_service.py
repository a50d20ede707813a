"""Unit tests for LedgerService and AccountApplicationService."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.fm_common.errors import InsufficientBalanceError, UserNotFoundError
from src.fm_common.pagination import cursor_decode
from src.fm_ledger.application.service import AccountApplicationService, LedgerService
from src.fm_ledger.domain.models import UserBalance
from tests.unit.fakes import FakeLedgerRepository


@pytest.fixture
def repo() -> FakeLedgerRepository:
    r = FakeLedgerRepository()
    r.add_user("u1")
    r.fund("u1", "100.00")
    return r


class TestLockUsers:
    async def test_sorted_and_deduplicated(self, repo: FakeLedgerRepository) -> None:
        repo.add_user("u0")
        locked = await LedgerService(repo).lock_users(MagicMock(), "u1", "u0", "u1")
        assert repo.lock_batches == [["u0", "u1"]]
        assert [b.user_id for b in locked] == ["u0", "u1"]

    async def test_missing_party(self, repo: FakeLedgerRepository) -> None:
        with pytest.raises(UserNotFoundError):
            await LedgerService(repo).lock_users(MagicMock(), "u1", "ghost")


class TestPost:
    async def test_signed_amount_and_snapshots(self, repo: FakeLedgerRepository) -> None:
        svc = LedgerService(repo)
        after, tx = await svc.post(MagicMock(), "u1", "payment", Decimal("-30.00"), order_id="ORD-1")

        assert after.balance == Decimal("70.00")
        assert tx.balance_before == Decimal("100.00")
        assert tx.balance_after == Decimal("70.00")
        assert tx.balance_before + tx.amount == tx.balance_after
        assert repo.locked == ["u1"]

    async def test_side_deltas_ride_along(self, repo: FakeLedgerRepository) -> None:
        repo.balances["u1"].pending_balance = Decimal("24.00")
        svc = LedgerService(repo)
        after, tx = await svc.post(
            MagicMock(),
            "u1",
            "earnings",
            Decimal("24.00"),
            pending=Decimal("-24.00"),
            earnings=Decimal("24.00"),
        )

        assert after.pending_balance == Decimal("0.00")
        assert after.total_earnings == Decimal("24.00")
        assert tx.balance_after == Decimal("124.00")

    async def test_unknown_user(self, repo: FakeLedgerRepository) -> None:
        with pytest.raises(UserNotFoundError):
            await LedgerService(repo).post(MagicMock(), "ghost", "deposit", Decimal("1.00"))
        assert len(repo.transactions) == 1

    async def test_shift_writes_no_audit_row(self, repo: FakeLedgerRepository) -> None:
        bal = await LedgerService(repo).shift(MagicMock(), "u1", pending=Decimal("5.00"))
        assert bal.pending_balance == Decimal("5.00")
        assert bal.balance == Decimal("100.00")
        assert len(repo.transactions) == 1


class TestRequireAvailable:
    async def test_enough(self, repo: FakeLedgerRepository) -> None:
        bal = await LedgerService(repo).require_available(MagicMock(), "u1", Decimal("100.00"))
        assert bal.balance == Decimal("100.00")

    async def test_short(self, repo: FakeLedgerRepository) -> None:
        with pytest.raises(InsufficientBalanceError):
            await LedgerService(repo).require_available(MagicMock(), "u1", Decimal("100.01"))


class TestAccountReads:
    async def test_balance_as_strings(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.get_balance.return_value = UserBalance(
            "u1", Decimal("70"), Decimal("24.5"), Decimal("0"), Decimal("0")
        )
        resp = await AccountApplicationService(mock_repo).get_balance(MagicMock(), "u1")

        assert resp.balance == "70.00"
        assert resp.pending_balance == "24.50"
        assert resp.held_balance == "0.00"

    async def test_missing_user(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.get_balance.return_value = None
        with pytest.raises(UserNotFoundError):
            await AccountApplicationService(mock_repo).get_balance(MagicMock(), "u1")

    async def test_history_newest_first_with_cursor(self, repo: FakeLedgerRepository) -> None:
        ledger = LedgerService(repo)
        for amount in ("-10.00", "-20.00", "5.00"):
            await ledger.post(MagicMock(), "u1", "payment", Decimal(amount))
        svc = AccountApplicationService(repo)

        page1 = await svc.list_transactions(MagicMock(), "u1", None, 2, None)
        assert [t.amount for t in page1.items] == ["5.00", "-20.00"]
        assert page1.has_more is True
        assert cursor_decode(page1.next_cursor) == page1.items[-1].id

        page2 = await svc.list_transactions(MagicMock(), "u1", page1.next_cursor, 2, None)
        assert [t.amount for t in page2.items] == ["-10.00", "100.00"]
        assert page2.has_more is False

    async def test_type_filter(self, repo: FakeLedgerRepository) -> None:
        await LedgerService(repo).post(MagicMock(), "u1", "payment", Decimal("-1.00"))
        page = await AccountApplicationService(repo).list_transactions(
            MagicMock(), "u1", None, 20, "deposit"
        )
        assert [t.type for t in page.items] == ["deposit"]
