"""Catalog repository Protocols: services and platform settings."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_catalog.domain.models import PackageTier, Service


class ServiceRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, service_id: str) -> Service | None: ...

    async def create(
        self,
        db: AsyncSession,
        seller_id: str,
        title: str,
        description: str | None,
        basic: PackageTier,
        standard: PackageTier,
        premium: PackageTier,
    ) -> Service: ...

    async def update_packages(
        self,
        db: AsyncSession,
        service_id: str,
        basic: PackageTier,
        standard: PackageTier,
        premium: PackageTier,
    ) -> Service | None: ...

    async def set_active(
        self, db: AsyncSession, service_id: str, is_active: bool
    ) -> Service | None: ...


class SettingRepositoryProtocol(Protocol):
    async def get(self, db: AsyncSession, key: str) -> str | None: ...

    async def upsert(self, db: AsyncSession, key: str, value: str) -> None: ...

    async def get_commission_rate(self, db: AsyncSession) -> Decimal: ...
