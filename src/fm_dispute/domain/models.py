"""Domain models for fm_dispute."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Dispute:
    id: str
    order_id: str
    complainant_id: str
    respondent_id: str
    reason: str
    status: str  # DisputeStatus value
    refund_amount: Decimal | None = None  # unset until resolution exists
    resolution: str | None = None
    created_at: datetime | None = None
    resolved_at: datetime | None = None

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.complainant_id, self.respondent_id)
