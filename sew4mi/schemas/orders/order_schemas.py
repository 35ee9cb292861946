from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime, date

from sew4mi.models.enums.order_status import OrderStatus, FabricChoice, UrgencyLevel
from sew4mi.models.enums.escrow_stage import EscrowStage
from sew4mi.models.enums.milestone_stage import MilestoneStage

# =====================================================
# PRICING
# =====================================================

class OrderPricingRequest(BaseModel):
    garment_type: str
    fabric_choice: FabricChoice = FabricChoice.CUSTOMER_PROVIDED
    urgency_level: UrgencyLevel = UrgencyLevel.STANDARD
    tailor_id: Optional[int] = None


class OrderPricingOut(BaseModel):
    garment_type: str
    base_price: Decimal
    fabric_cost: Decimal
    urgency_surcharge: Decimal
    total_amount: Decimal
    deposit_amount: Decimal
    fitting_amount: Decimal
    final_amount: Decimal
    estimated_days: int


class GarmentTypeOut(BaseModel):
    id: str
    name: str
    category: str
    base_price: Decimal
    fabric_yards: Decimal
    estimated_days: int


# =====================================================
# CREATE
# =====================================================

class OrderCreate(BaseModel):
    tailor_id: int
    garment_type: str
    fabric_choice: FabricChoice = FabricChoice.CUSTOMER_PROVIDED
    urgency_level: UrgencyLevel = UrgencyLevel.STANDARD
    family_profile_id: Optional[int] = None
    special_instructions: Optional[str] = Field(None, max_length=1000)


class OrderCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


# =====================================================
# RESPONSES
# =====================================================

class OrderOut(BaseModel):
    id: int
    order_number: str
    customer_id: int
    tailor_id: int
    family_profile_id: Optional[int]
    garment_type: str
    fabric_choice: FabricChoice
    urgency_level: UrgencyLevel
    special_instructions: Optional[str]
    status: OrderStatus
    version: int

    base_price: Decimal
    fabric_cost: Decimal
    urgency_surcharge: Decimal
    total_amount: Decimal
    deposit_amount: Decimal
    fitting_amount: Decimal
    final_amount: Decimal
    escrow_stage: EscrowStage

    estimated_delivery: Optional[date]
    actual_delivery: Optional[datetime]
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class OrderListItem(BaseModel):
    id: int
    order_number: str
    garment_type: str
    status: OrderStatus
    total_amount: Decimal
    escrow_stage: EscrowStage
    estimated_delivery: Optional[date]
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderListData(BaseModel):
    total: int
    items: List[OrderListItem]


# =====================================================
# PROGRESS
# =====================================================

class OrderProgressOut(BaseModel):
    order_id: int
    current_status: OrderStatus
    progress_percentage: int
    completed_milestones: int
    total_milestones: int
    next_milestone: Optional[MilestoneStage]
    estimated_completion: Optional[datetime]
    days_remaining: Optional[int]


class MilestoneDisplayOut(BaseModel):
    stage: MilestoneStage
    name: str
    description: str
    weight: int
    expected_days: int


class OrderProgressDetailOut(BaseModel):
    progress: OrderProgressOut
    overdue_milestones: List[MilestoneStage]
    next_milestone_info: Optional[MilestoneDisplayOut]
