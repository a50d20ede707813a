"""CatalogApplicationService: the slice of the catalog the ledger depends on.

Package price edits only ever touch the services row; orders carry their own
price/commission snapshot and are never re-priced.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_catalog.application.schemas import CreateServiceRequest, PackagesIn, ServiceResponse
from src.fm_catalog.domain.repository import ServiceRepositoryProtocol
from src.fm_catalog.infrastructure.persistence import ServiceRepository
from src.fm_common.errors import (
    SellerRequiredError,
    ServiceNotFoundError,
    ServiceOwnershipError,
)
from src.fm_common.unit_of_work import unit_of_work

logger = logging.getLogger(__name__)


class CatalogApplicationService:
    def __init__(self, repo: ServiceRepositoryProtocol | None = None) -> None:
        self._repo: ServiceRepositoryProtocol = repo or ServiceRepository()

    async def create_service(
        self, db: AsyncSession, seller_id: str, role: str, req: CreateServiceRequest
    ) -> ServiceResponse:
        if role != "seller":
            raise SellerRequiredError()
        basic, standard, premium = req.packages.to_tiers()
        async with unit_of_work(db):
            service = await self._repo.create(
                db, seller_id, req.title, req.description, basic, standard, premium
            )
        logger.info("Service %s created by seller=%s", service.id, seller_id)
        return ServiceResponse.from_domain(service)

    async def get_service(self, db: AsyncSession, service_id: str) -> ServiceResponse:
        service = await self._repo.get_by_id(db, service_id)
        if service is None:
            raise ServiceNotFoundError(service_id)
        return ServiceResponse.from_domain(service)

    async def update_packages(
        self, db: AsyncSession, service_id: str, seller_id: str, packages: PackagesIn
    ) -> ServiceResponse:
        basic, standard, premium = packages.to_tiers()
        async with unit_of_work(db):
            service = await self._repo.get_by_id(db, service_id)
            if service is None:
                raise ServiceNotFoundError(service_id)
            if service.seller_id != seller_id:
                raise ServiceOwnershipError(service_id)
            updated = await self._repo.update_packages(db, service_id, basic, standard, premium)
            if updated is None:
                raise ServiceNotFoundError(service_id)
        return ServiceResponse.from_domain(updated)

    async def set_active(
        self, db: AsyncSession, service_id: str, seller_id: str, is_active: bool
    ) -> ServiceResponse:
        async with unit_of_work(db):
            service = await self._repo.get_by_id(db, service_id)
            if service is None:
                raise ServiceNotFoundError(service_id)
            if service.seller_id != seller_id:
                raise ServiceOwnershipError(service_id)
            updated = await self._repo.set_active(db, service_id, is_active)
            if updated is None:
                raise ServiceNotFoundError(service_id)
        return ServiceResponse.from_domain(updated)
