"""Domain models for fm_catalog: pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class PackageTier:
    """One pricing tier as stored on the service; standard/premium may be partial."""

    type: str  # PackageType value
    price: Decimal | None
    delivery_days: int | None
    description: str | None = None


@dataclass(frozen=True)
class PackageSnapshot:
    """Fully resolved tier, frozen onto an order at creation time."""

    type: str
    price: Decimal
    delivery_days: int
    description: str | None


@dataclass
class Service:
    id: str
    seller_id: str
    title: str
    description: str | None
    basic: PackageTier
    standard: PackageTier
    premium: PackageTier
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def tier(self, package_type: str) -> PackageTier:
        return {"basic": self.basic, "standard": self.standard, "premium": self.premium}[
            package_type
        ]
