"""Pydantic schemas for fm_dispute API."""

from pydantic import BaseModel, Field

from src.fm_common.datetime_utils import isoformat_or_none
from src.fm_common.money import money_str
from src.fm_dispute.domain.models import Dispute


class OpenDisputeRequest(BaseModel):
    order_id: str = Field(..., min_length=1, max_length=64)
    reason: str = Field(..., min_length=1, max_length=5000)


class DisputeResponse(BaseModel):
    id: str
    order_id: str
    complainant_id: str
    respondent_id: str
    reason: str
    status: str
    refund_amount: str | None
    resolution: str | None
    created_at: str | None
    resolved_at: str | None

    @classmethod
    def from_domain(cls, d: Dispute) -> "DisputeResponse":
        return cls(
            id=d.id,
            order_id=d.order_id,
            complainant_id=d.complainant_id,
            respondent_id=d.respondent_id,
            reason=d.reason,
            status=d.status,
            refund_amount=money_str(d.refund_amount) if d.refund_amount is not None else None,
            resolution=d.resolution,
            created_at=isoformat_or_none(d.created_at),
            resolved_at=isoformat_or_none(d.resolved_at),
        )


class DisputeListResponse(BaseModel):
    items: list[DisputeResponse]
    next_cursor: str | None
    has_more: bool
