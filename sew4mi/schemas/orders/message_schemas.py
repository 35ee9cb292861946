from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime


class MessageCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=2000)

    @field_validator("body")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message cannot be blank")
        return v.strip()


class MessageOut(BaseModel):
    id: int
    order_id: int
    sender_id: int
    body: str
    read_at: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}


class MessageListData(BaseModel):
    total: int
    items: List[MessageOut]
