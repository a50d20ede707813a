"""Pydantic schemas for fm_ledger API. Money travels as '0.00' strings."""

from typing import Any

from pydantic import BaseModel

from src.fm_common.money import money_str
from src.fm_ledger.domain.models import Transaction, UserBalance


class BalanceResponse(BaseModel):
    user_id: str
    balance: str
    pending_balance: str
    held_balance: str
    total_earnings: str

    @classmethod
    def from_domain(cls, bal: UserBalance) -> "BalanceResponse":
        return cls(
            user_id=bal.user_id,
            balance=money_str(bal.balance),
            pending_balance=money_str(bal.pending_balance),
            held_balance=money_str(bal.held_balance),
            total_earnings=money_str(bal.total_earnings),
        )


class TransactionItem(BaseModel):
    id: int
    type: str
    order_id: str | None
    amount: str
    balance_before: str
    balance_after: str
    description: str | None
    metadata: dict[str, Any] | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, tx: Transaction) -> "TransactionItem":
        return cls(
            id=tx.id,
            type=tx.type,
            order_id=tx.order_id,
            amount=money_str(tx.amount),
            balance_before=money_str(tx.balance_before),
            balance_after=money_str(tx.balance_after),
            description=tx.description,
            metadata=tx.metadata,
            created_at=tx.created_at.isoformat() if tx.created_at else "",
        )


class TransactionListResponse(BaseModel):
    items: list[TransactionItem]
    next_cursor: str | None
    has_more: bool
