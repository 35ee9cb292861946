from pydantic import BaseModel, Field, model_validator
from typing import List, Literal, Optional
from datetime import datetime

from sew4mi.models.enums.milestone_stage import (
    MilestoneStage,
    MilestoneApprovalStatus,
    MilestoneApprovalAction,
)


# =====================================================
# PAYLOADS
# =====================================================

class MilestoneSubmit(BaseModel):
    milestone: MilestoneStage
    photo_url: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)


class MilestoneReview(BaseModel):
    action: Literal["APPROVED", "REJECTED"]
    comment: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def rejection_needs_comment(self):
        if self.action == "REJECTED" and not (self.comment or "").strip():
            raise ValueError("A comment is required when rejecting a milestone")
        return self


# =====================================================
# RESPONSES
# =====================================================

class MilestoneOut(BaseModel):
    id: int
    order_id: int
    milestone: MilestoneStage
    photo_url: Optional[str]
    notes: Optional[str]
    verified_at: datetime
    verified_by_id: Optional[int]
    approval_status: MilestoneApprovalStatus
    customer_reviewed_at: Optional[datetime]
    auto_approval_deadline: datetime
    rejection_reason: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class MilestoneApprovalOut(BaseModel):
    id: int
    milestone_id: int
    order_id: int
    customer_id: Optional[int]
    action: MilestoneApprovalAction
    comment: Optional[str]
    reviewed_at: datetime

    model_config = {"from_attributes": True}


class MilestoneReviewResult(BaseModel):
    milestone: MilestoneOut
    order_status: str
    progress_percentage: int
    payment_triggered: bool


class AutoApprovalResult(BaseModel):
    processed: int
    approved: int
    failed: int
