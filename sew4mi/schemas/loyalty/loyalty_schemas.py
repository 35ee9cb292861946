from pydantic import BaseModel
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from sew4mi.models.enums.loyalty_tier import LoyaltyTier, LoyaltyTransactionType, RewardType


class LoyaltyAccountOut(BaseModel):
    user_id: int
    total_points: int
    available_points: int
    lifetime_points: int
    tier: LoyaltyTier
    completed_orders: int
    next_tier: Optional[LoyaltyTier] = None
    points_to_next_tier: int = 0

    model_config = {"from_attributes": True}


class LoyaltyTransactionOut(BaseModel):
    id: int
    order_id: Optional[int]
    reward_id: Optional[int]
    transaction_type: LoyaltyTransactionType
    points: int
    description: str
    created_at: datetime

    model_config = {"from_attributes": True}


class LoyaltyTransactionListData(BaseModel):
    total: int
    items: List[LoyaltyTransactionOut]


class LoyaltyRewardOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    points_cost: int
    reward_type: RewardType
    discount_percentage: Optional[Decimal]
    is_active: bool

    model_config = {"from_attributes": True}


class RedeemRewardResult(BaseModel):
    reward: LoyaltyRewardOut
    points_spent: int
    available_points: int


class PointsCalculation(BaseModel):
    base_points: int
    repeat_tailor_bonus: int
    group_order_bonus: int
    tier_bonus: int
    total_points: int
