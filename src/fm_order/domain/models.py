"""Domain models for fm_order: pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Order:
    id: str
    service_id: str
    buyer_id: str
    seller_id: str
    package_type: str  # PackageType value
    price: Decimal  # frozen at creation
    commission: Decimal  # frozen at creation
    delivery_days: int
    status: str  # OrderStatus value
    due_date: datetime
    delivery_url: str | None = None
    delivery_notes: str | None = None
    revision_count: int = 0
    max_revisions: int = 2
    completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def seller_amount(self) -> Decimal:
        """What the seller receives: price minus the platform's cut."""
        return self.price - self.commission

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.buyer_id, self.seller_id)
