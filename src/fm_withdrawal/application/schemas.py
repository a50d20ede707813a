"""Pydantic schemas for fm_withdrawal API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.fm_common.datetime_utils import isoformat_or_none
from src.fm_common.money import money_str
from src.fm_withdrawal.domain.models import WithdrawalRequest


class CreateWithdrawalRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    payment_method: str = Field(..., min_length=1, max_length=50)
    payment_details: str = Field(..., min_length=1, max_length=2000)


class WithdrawalResponse(BaseModel):
    id: str
    user_id: str
    amount: str
    status: str
    payment_method: str
    payment_details: str
    held: bool
    processed_by: str | None
    processed_at: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, req: WithdrawalRequest) -> "WithdrawalResponse":
        return cls(
            id=req.id,
            user_id=req.user_id,
            amount=money_str(req.amount),
            status=req.status,
            payment_method=req.payment_method,
            payment_details=req.payment_details,
            held=req.held,
            processed_by=req.processed_by,
            processed_at=isoformat_or_none(req.processed_at),
            created_at=isoformat_or_none(req.created_at),
        )


class WithdrawalListResponse(BaseModel):
    items: list[WithdrawalResponse]
    next_cursor: str | None
    has_more: bool


class ProcessWithdrawalResponse(BaseModel):
    success: bool
    withdrawal: WithdrawalResponse
