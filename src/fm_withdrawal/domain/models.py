"""Domain models for fm_withdrawal."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class WithdrawalRequest:
    id: str
    user_id: str
    amount: Decimal
    status: str  # WithdrawalStatus value
    payment_method: str
    payment_details: str
    held: bool = False  # amount was moved to held_balance at request time
    processed_by: str | None = None
    processed_at: datetime | None = None
    created_at: datetime | None = None
