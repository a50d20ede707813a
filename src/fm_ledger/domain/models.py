"""Domain models for fm_ledger: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any


@dataclass
class UserBalance:
    user_id: str
    balance: Decimal          # available, may go negative only via unguarded approval
    pending_balance: Decimal  # earned, not yet releasable
    held_balance: Decimal     # reserved by pending withdrawals (hold mode only)
    total_earnings: Decimal   # lifetime, never decreases


@dataclass
class Transaction:
    """Immutable audit row. amount is signed: balance_after == balance_before + amount."""

    id: int                   # BIGSERIAL, defines replay order
    user_id: str
    type: str                 # TransactionType value
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    order_id: str | None = None
    description: str | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class NewTransaction:
    user_id: str
    type: str
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    order_id: str | None = None
    description: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
