from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from sew4mi.models.enums.order_status import OrderStatus
from sew4mi.models.enums.dispute_status import DisputeStatus, DisputeResolutionType


# =====================================================
# PAYLOADS
# =====================================================

class DisputeCreate(BaseModel):
    milestone_id: int
    reason: str = Field(..., min_length=10, max_length=1000)
    evidence: Optional[str] = Field(None, max_length=2000)
    evidence_urls: List[str] = Field(default_factory=list, max_length=5)

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 10:
            raise ValueError("Reason must be at least 10 characters")
        return v

    @field_validator("evidence_urls")
    @classmethod
    def urls_only(cls, v: List[str]) -> List[str]:
        for url in v:
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"Invalid evidence URL: {url}")
        return v


class DisputeResolve(BaseModel):
    resolution_type: DisputeResolutionType
    outcome: str = Field(..., min_length=10, max_length=1000)
    reason_code: str = Field("ADMIN_DECISION", max_length=50)
    admin_notes: Optional[str] = Field(None, max_length=2000)


class DisputeMessageCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=1000)

    @field_validator("body")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message cannot be blank")
        return v.strip()


# =====================================================
# RESPONSES
# =====================================================

class DisputeOut(BaseModel):
    id: int
    order_id: int
    milestone_id: int
    raised_by_id: int
    reason: str
    evidence: Optional[str]
    evidence_urls: List[str]
    status: DisputeStatus
    previous_order_status: OrderStatus
    resolution_type: Optional[DisputeResolutionType]
    outcome: Optional[str]
    reason_code: Optional[str]
    resolved_by_id: Optional[int]
    resolved_at: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}


class DisputeResolutionResult(BaseModel):
    dispute: DisputeOut
    order_status: OrderStatus
    refunded_amount: Decimal


class DisputeMessageOut(BaseModel):
    id: int
    dispute_id: int
    sender_id: int
    sender_role: str
    body: str
    created_at: datetime

    model_config = {"from_attributes": True}
