from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from decimal import Decimal
from datetime import datetime

from sew4mi.models.enums.review_status import ModerationStatus, VoteType, ReviewIneligibilityReason


# =====================================================
# PAYLOADS
# =====================================================

class ReviewCreate(BaseModel):
    order_id: int
    rating: int = Field(..., ge=1, le=5)
    fit_rating: Optional[int] = Field(None, ge=1, le=5)
    quality_rating: Optional[int] = Field(None, ge=1, le=5)
    communication_rating: Optional[int] = Field(None, ge=1, le=5)
    timeliness_rating: Optional[int] = Field(None, ge=1, le=5)
    review_text: Optional[str] = Field(None, max_length=2000)


class ReviewVoteCreate(BaseModel):
    vote_type: VoteType


class ReviewResponseCreate(BaseModel):
    response_text: str = Field(..., min_length=10, max_length=1000)


class ReviewModerate(BaseModel):
    status: ModerationStatus
    reason: Optional[str] = Field(None, max_length=255)


# =====================================================
# RESPONSES
# =====================================================

class ReviewEligibilityOut(BaseModel):
    order_id: int
    eligible: bool
    reason: Optional[ReviewIneligibilityReason] = None
    days_remaining: Optional[int] = None


class ReviewResponseOut(BaseModel):
    id: int
    tailor_id: int
    response_text: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ReviewOut(BaseModel):
    id: int
    order_id: int
    customer_id: int
    tailor_id: int
    rating: int
    fit_rating: Optional[int]
    quality_rating: Optional[int]
    communication_rating: Optional[int]
    timeliness_rating: Optional[int]
    category_average: Optional[Decimal]
    review_text: Optional[str]
    moderation_status: ModerationStatus
    moderation_reason: Optional[str]
    helpful_count: int
    unhelpful_count: int
    response: Optional[ReviewResponseOut] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ReviewListData(BaseModel):
    total: int
    items: List[ReviewOut]


class TailorRatingSummary(BaseModel):
    tailor_id: int
    average_rating: Decimal
    total_reviews: int
    distribution: Dict[int, int]
