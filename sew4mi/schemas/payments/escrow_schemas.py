from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from sew4mi.models.enums.escrow_stage import EscrowStage, EscrowTransactionType


class DepositPaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    external_reference: Optional[str] = Field(None, max_length=255)


class EscrowTransactionOut(BaseModel):
    id: int
    order_id: int
    transaction_type: EscrowTransactionType
    amount: Decimal
    from_stage: Optional[EscrowStage]
    to_stage: EscrowStage
    external_reference: Optional[str]
    actor_id: Optional[int]
    notes: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class EscrowStatusOut(BaseModel):
    order_id: int
    order_number: str
    stage: EscrowStage
    total_amount: Decimal
    deposit_amount: Decimal
    fitting_amount: Decimal
    final_amount: Decimal
    deposit_paid: Decimal
    fitting_paid: Decimal
    final_paid: Decimal
    refunded_amount: Decimal
    escrow_balance: Decimal
    next_stage_amount: Decimal
    transactions: List[EscrowTransactionOut]


class EscrowValidationOut(BaseModel):
    order_id: int
    is_valid: bool
    errors: List[str]
