"""Global enums: must match DB CHECK constraints exactly.

See alembic/versions/ for the authoritative constraint lists.
"""

from enum import Enum


class UserRole(str, Enum):
    CLIENT = "client"
    SELLER = "seller"
    ADMIN = "admin"


class PackageType(str, Enum):
    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"


class OrderStatus(str, Enum):
    CREATED = "created"
    IN_PROGRESS = "in_progress"
    REVISION = "revision"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DISPUTE = "dispute"


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    PAYMENT = "payment"
    REFUND = "refund"
    WITHDRAWAL = "withdrawal"
    COMMISSION = "commission"
    EARNINGS = "earnings"


class WithdrawalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DisputeStatus(str, Enum):
    OPEN = "open"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"
