"""Unit tests for AdminService: deposits, commission rate, bans, ledger audit."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.fm_admin.application.service import AdminService
from src.fm_common.errors import InvalidAmountError, InvalidCommissionRateError, UserNotFoundError
from tests.unit.fakes import FakeLedgerRepository, FakeSettingRepository, make_db


@pytest.fixture
def ledger() -> FakeLedgerRepository:
    repo = FakeLedgerRepository()
    repo.add_user("u1")
    return repo


@pytest.fixture
def settings_repo() -> FakeSettingRepository:
    return FakeSettingRepository("20")


@pytest.fixture
def svc(ledger: FakeLedgerRepository, settings_repo: FakeSettingRepository) -> AdminService:
    return AdminService(ledger_repo=ledger, setting_repo=settings_repo)


class TestDeposit:
    async def test_credits_with_deposit_row(
        self, svc: AdminService, ledger: FakeLedgerRepository
    ) -> None:
        db = make_db()
        result = await svc.deposit(db, "u1", Decimal("100.00"), "admin-1", None)

        assert result["balance"] == "100.00"
        assert result["transaction"]["type"] == "deposit"
        assert ledger.txs_for("u1")[0].metadata == {"credited_by": "admin-1"}
        db.commit.assert_awaited_once()

    async def test_non_positive_rejected(self, svc: AdminService) -> None:
        with pytest.raises(InvalidAmountError):
            await svc.deposit(make_db(), "u1", Decimal("0"), "admin-1", None)

    async def test_unknown_user(self, svc: AdminService) -> None:
        with pytest.raises(UserNotFoundError):
            await svc.deposit(make_db(), "ghost", Decimal("1.00"), "admin-1", None)


class TestCommissionRate:
    async def test_set_and_read(
        self, svc: AdminService, settings_repo: FakeSettingRepository
    ) -> None:
        await svc.set_commission_rate(make_db(), Decimal("12.5"))
        assert settings_repo.values["commission_rate"] == "12.5"
        assert (await svc.get_commission_rate(make_db())) == {"commission_rate": "12.5"}

    async def test_out_of_range(self, svc: AdminService) -> None:
        with pytest.raises(InvalidCommissionRateError):
            await svc.set_commission_rate(make_db(), Decimal("101"))


class TestToggleBan:
    async def test_returns_new_flag(self, svc: AdminService) -> None:
        row = MagicMock(id="u1", username="alice", is_banned=True)
        result = MagicMock()
        result.fetchone.return_value = row
        db = make_db()
        db.execute = AsyncMock(return_value=result)

        assert await svc.toggle_ban(db, "u1") == {
            "user_id": "u1",
            "username": "alice",
            "is_banned": True,
        }

    async def test_unknown_user(self, svc: AdminService) -> None:
        result = MagicMock()
        result.fetchone.return_value = None
        db = make_db()
        db.execute = AsyncMock(return_value=result)

        with pytest.raises(UserNotFoundError):
            await svc.toggle_ban(db, "ghost")
        db.rollback.assert_awaited_once()


class TestVerifyLedger:
    async def test_clean_ledger(self, svc: AdminService, ledger: FakeLedgerRepository) -> None:
        ledger.fund("u1", "10.00")
        with patch(
            "src.fm_admin.application.service.verify_conservation",
            AsyncMock(return_value=[]),
        ):
            report = await svc.verify_ledger(make_db())
        assert report == {"ok": True, "users_checked": 1, "violations": []}

    async def test_drift_and_conservation_reported(
        self, svc: AdminService, ledger: FakeLedgerRepository
    ) -> None:
        ledger.fund("u1", "10.00")
        ledger.balances["u1"].balance = Decimal("11.00")
        with patch(
            "src.fm_admin.application.service.verify_conservation",
            AsyncMock(return_value=["Conservation violated"]),
        ):
            report = await svc.verify_ledger(make_db())

        assert report["ok"] is False
        assert len(report["violations"]) == 2
