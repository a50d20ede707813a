"""Pydantic schemas for fm_catalog API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.fm_catalog.domain.models import PackageTier, Service
from src.fm_common.money import money_str


class PackageIn(BaseModel):
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    delivery_days: int = Field(..., ge=1, le=365)
    description: str | None = Field(None, max_length=2000)


class OptionalPackageIn(BaseModel):
    """Standard/premium: any field left out falls back to the basic tier."""

    price: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    delivery_days: int | None = Field(None, ge=1, le=365)
    description: str | None = Field(None, max_length=2000)


class PackagesIn(BaseModel):
    basic: PackageIn
    standard: OptionalPackageIn = Field(default_factory=OptionalPackageIn)
    premium: OptionalPackageIn = Field(default_factory=OptionalPackageIn)

    def to_tiers(self) -> tuple[PackageTier, PackageTier, PackageTier]:
        return (
            PackageTier("basic", self.basic.price, self.basic.delivery_days, self.basic.description),
            PackageTier(
                "standard",
                self.standard.price,
                self.standard.delivery_days,
                self.standard.description,
            ),
            PackageTier(
                "premium",
                self.premium.price,
                self.premium.delivery_days,
                self.premium.description,
            ),
        )


class CreateServiceRequest(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str | None = Field(None, max_length=5000)
    packages: PackagesIn


class PackageOut(BaseModel):
    price: str | None
    delivery_days: int | None
    description: str | None

    @classmethod
    def from_tier(cls, tier: PackageTier) -> "PackageOut":
        return cls(
            price=money_str(tier.price) if tier.price is not None else None,
            delivery_days=tier.delivery_days,
            description=tier.description,
        )


class ServiceResponse(BaseModel):
    id: str
    seller_id: str
    title: str
    description: str | None
    basic: PackageOut
    standard: PackageOut
    premium: PackageOut
    is_active: bool

    @classmethod
    def from_domain(cls, service: Service) -> "ServiceResponse":
        return cls(
            id=service.id,
            seller_id=service.seller_id,
            title=service.title,
            description=service.description,
            basic=PackageOut.from_tier(service.basic),
            standard=PackageOut.from_tier(service.standard),
            premium=PackageOut.from_tier(service.premium),
            is_active=service.is_active,
        )
