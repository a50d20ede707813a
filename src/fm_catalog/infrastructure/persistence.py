"""ServiceRepository: raw SQL access to the services table.

Only the columns the ledger needs are modelled (seller, tiers, active flag);
catalog browsing lives elsewhere.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_catalog.domain.models import PackageTier, Service
from src.fm_common.errors import InternalError

_SERVICE_COLUMNS = """
    id, seller_id, title, description,
    basic_price, basic_delivery_days, basic_description,
    standard_price, standard_delivery_days, standard_description,
    premium_price, premium_delivery_days, premium_description,
    is_active, created_at, updated_at
"""

_GET_SERVICE_SQL = text(f"""
    SELECT {_SERVICE_COLUMNS}
    FROM services
    WHERE id = :service_id
""")

_INSERT_SERVICE_SQL = text(f"""
    INSERT INTO services
        (seller_id, title, description,
         basic_price, basic_delivery_days, basic_description,
         standard_price, standard_delivery_days, standard_description,
         premium_price, premium_delivery_days, premium_description)
    VALUES
        (:seller_id, :title, :description,
         :basic_price, :basic_delivery_days, :basic_description,
         :standard_price, :standard_delivery_days, :standard_description,
         :premium_price, :premium_delivery_days, :premium_description)
    RETURNING {_SERVICE_COLUMNS}
""")

_UPDATE_PACKAGES_SQL = text(f"""
    UPDATE services
    SET basic_price = :basic_price,
        basic_delivery_days = :basic_delivery_days,
        basic_description = :basic_description,
        standard_price = :standard_price,
        standard_delivery_days = :standard_delivery_days,
        standard_description = :standard_description,
        premium_price = :premium_price,
        premium_delivery_days = :premium_delivery_days,
        premium_description = :premium_description,
        updated_at = NOW()
    WHERE id = :service_id
    RETURNING {_SERVICE_COLUMNS}
""")

_SET_ACTIVE_SQL = text(f"""
    UPDATE services
    SET is_active = :is_active, updated_at = NOW()
    WHERE id = :service_id
    RETURNING {_SERVICE_COLUMNS}
""")


def _row_to_service(row: Any) -> Service:
    return Service(
        id=row.id,
        seller_id=row.seller_id,
        title=row.title,
        description=row.description,
        basic=PackageTier("basic", row.basic_price, row.basic_delivery_days, row.basic_description),
        standard=PackageTier(
            "standard", row.standard_price, row.standard_delivery_days, row.standard_description
        ),
        premium=PackageTier(
            "premium", row.premium_price, row.premium_delivery_days, row.premium_description
        ),
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _tier_params(basic: PackageTier, standard: PackageTier, premium: PackageTier) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for tier in (basic, standard, premium):
        params[f"{tier.type}_price"] = tier.price
        params[f"{tier.type}_delivery_days"] = tier.delivery_days
        params[f"{tier.type}_description"] = tier.description
    return params


class ServiceRepository:
    async def get_by_id(self, db: AsyncSession, service_id: str) -> Service | None:
        row = (await db.execute(_GET_SERVICE_SQL, {"service_id": service_id})).fetchone()
        return _row_to_service(row) if row else None

    async def create(
        self,
        db: AsyncSession,
        seller_id: str,
        title: str,
        description: str | None,
        basic: PackageTier,
        standard: PackageTier,
        premium: PackageTier,
    ) -> Service:
        params = {
            "seller_id": seller_id,
            "title": title,
            "description": description,
            **_tier_params(basic, standard, premium),
        }
        row = (await db.execute(_INSERT_SERVICE_SQL, params)).fetchone()
        if row is None:
            raise InternalError("Service insert returned no rows")
        return _row_to_service(row)

    async def update_packages(
        self,
        db: AsyncSession,
        service_id: str,
        basic: PackageTier,
        standard: PackageTier,
        premium: PackageTier,
    ) -> Service | None:
        params = {"service_id": service_id, **_tier_params(basic, standard, premium)}
        row = (await db.execute(_UPDATE_PACKAGES_SQL, params)).fetchone()
        return _row_to_service(row) if row else None

    async def set_active(
        self, db: AsyncSession, service_id: str, is_active: bool
    ) -> Service | None:
        row = (
            await db.execute(_SET_ACTIVE_SQL, {"service_id": service_id, "is_active": is_active})
        ).fetchone()
        return _row_to_service(row) if row else None
