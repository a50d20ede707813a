"""Admin application service: bans, deposits, commission rate, ledger audit.

Withdrawal processing, order and dispute listings delegate to the owning
context's service so every balance write still goes through LedgerService.
"""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_catalog.domain.repository import SettingRepositoryProtocol
from src.fm_catalog.infrastructure.settings_repository import (
    COMMISSION_RATE_KEY,
    SettingRepository,
)
from src.fm_common.enums import TransactionType
from src.fm_common.errors import InvalidAmountError, InvalidCommissionRateError, UserNotFoundError
from src.fm_common.money import ZERO, money_str, validate_commission_rate
from src.fm_common.unit_of_work import unit_of_work
from src.fm_ledger.application.schemas import TransactionItem
from src.fm_ledger.application.service import LedgerService
from src.fm_ledger.domain.invariants import verify_conservation
from src.fm_ledger.domain.replay import replay_transactions
from src.fm_ledger.domain.repository import LedgerRepositoryProtocol
from src.fm_ledger.infrastructure.persistence import LedgerRepository

logger = logging.getLogger(__name__)

_TOGGLE_BAN_SQL = text("""
    UPDATE users
    SET is_banned = NOT is_banned, updated_at = NOW()
    WHERE id = :user_id
    RETURNING id, username, is_banned
""")


class AdminService:
    def __init__(
        self,
        ledger_repo: LedgerRepositoryProtocol | None = None,
        setting_repo: SettingRepositoryProtocol | None = None,
    ) -> None:
        self._ledger_repo: LedgerRepositoryProtocol = ledger_repo or LedgerRepository()
        self._ledger = LedgerService(self._ledger_repo)
        self._settings: SettingRepositoryProtocol = setting_repo or SettingRepository()

    async def toggle_ban(self, db: AsyncSession, user_id: str) -> dict[str, Any]:
        async with unit_of_work(db):
            row = (await db.execute(_TOGGLE_BAN_SQL, {"user_id": user_id})).fetchone()
            if row is None:
                raise UserNotFoundError(user_id)
        logger.info("User %s is_banned=%s", user_id, row.is_banned)
        return {"user_id": row.id, "username": row.username, "is_banned": row.is_banned}

    async def deposit(
        self, db: AsyncSession, user_id: str, amount: Decimal, admin_id: str, note: str | None
    ) -> dict[str, Any]:
        """Manual credit: the only way money enters the system."""
        if amount <= ZERO:
            raise InvalidAmountError("deposit must be positive")
        async with unit_of_work(db):
            after, tx = await self._ledger.post(
                db,
                user_id,
                TransactionType.DEPOSIT.value,
                amount,
                description=note or "Manual deposit",
                metadata={"credited_by": admin_id},
            )
        logger.info("Deposit %s credited to user=%s by admin=%s", amount, user_id, admin_id)
        return {
            "user_id": user_id,
            "balance": money_str(after.balance),
            "transaction": TransactionItem.from_domain(tx).model_dump(),
        }

    async def get_commission_rate(self, db: AsyncSession) -> dict[str, str]:
        rate = await self._settings.get_commission_rate(db)
        return {"commission_rate": str(rate)}

    async def set_commission_rate(self, db: AsyncSession, rate: Decimal) -> dict[str, str]:
        """Affects orders created from now on; existing orders keep their commission."""
        try:
            validate_commission_rate(rate)
        except ValueError:
            raise InvalidCommissionRateError(str(rate)) from None
        async with unit_of_work(db):
            await self._settings.upsert(db, COMMISSION_RATE_KEY, str(rate))
        logger.info("Commission rate set to %s", rate)
        return {"commission_rate": str(rate)}

    async def verify_ledger(self, db: AsyncSession) -> dict[str, object]:
        """Per-user replay of the transaction chain plus global conservation."""
        violations: list[str] = []
        balances = await self._ledger_repo.list_balances(db)
        for bal in balances:
            history = await self._ledger_repo.list_user_history(db, bal.user_id)
            violations.extend(replay_transactions(bal.user_id, history, bal.balance))
        violations.extend(await verify_conservation(db))
        if violations:
            logger.error("Ledger verification found %d violation(s)", len(violations))
        return {"ok": not violations, "users_checked": len(balances), "violations": violations}
