from pydantic import BaseModel
from typing import Optional
from decimal import Decimal


class UserOut(BaseModel):
    id: int
    email: str
    full_name: str
    phone: Optional[str]
    role: str
    is_active: bool
    rush_order_fee_percentage: Optional[Decimal]
    vacation_mode: bool

    model_config = {"from_attributes": True}
