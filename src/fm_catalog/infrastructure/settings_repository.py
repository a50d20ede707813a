"""SettingRepository: key/value platform settings (settings table)."""

from decimal import Decimal, InvalidOperation

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings as app_settings
from src.fm_common.errors import InvalidCommissionRateError
from src.fm_common.money import validate_commission_rate

COMMISSION_RATE_KEY = "commission_rate"

_GET_SETTING_SQL = text("SELECT value FROM settings WHERE key = :key")

_UPSERT_SETTING_SQL = text("""
    INSERT INTO settings (key, value)
    VALUES (:key, :value)
    ON CONFLICT (key) DO UPDATE
        SET value = EXCLUDED.value,
            updated_at = NOW()
""")


def parse_commission_rate(raw: str) -> Decimal:
    try:
        return validate_commission_rate(Decimal(raw))
    except (InvalidOperation, ValueError):
        raise InvalidCommissionRateError(raw) from None


class SettingRepository:
    async def get(self, db: AsyncSession, key: str) -> str | None:
        row = (await db.execute(_GET_SETTING_SQL, {"key": key})).fetchone()
        return row.value if row else None

    async def upsert(self, db: AsyncSession, key: str, value: str) -> None:
        await db.execute(_UPSERT_SETTING_SQL, {"key": key, "value": value})

    async def get_commission_rate(self, db: AsyncSession) -> Decimal:
        """Current commission percentage; the config default when unset."""
        raw = await self.get(db, COMMISSION_RATE_KEY)
        if raw is None:
            return Decimal(app_settings.DEFAULT_COMMISSION_RATE)
        return parse_commission_rate(raw)
