from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
from datetime import date, datetime

from sew4mi.models.enums.family_profile import (
    RelationshipType,
    Gender,
    ProfileVisibility,
    ReminderFrequency,
)


def _check_measurements(v: Optional[Dict[str, float]]) -> Optional[Dict[str, float]]:
    if v is None:
        return v
    for name, value in v.items():
        if not name or not name.strip():
            raise ValueError("Measurement names cannot be empty")
        if value is None or value <= 0:
            raise ValueError(f"Measurement '{name}' must be a positive number")
    return v


# =====================================================
# PAYLOADS
# =====================================================

class FamilyProfileCreate(BaseModel):
    nickname: str = Field(..., min_length=1, max_length=50)
    relationship: RelationshipType
    gender: Gender
    birth_date: Optional[date] = None
    avatar_url: Optional[str] = Field(None, max_length=500)
    measurements: Dict[str, float] = Field(default_factory=dict)
    visibility: ProfileVisibility = ProfileVisibility.FAMILY_ONLY
    growth_tracking_enabled: bool = False
    reminder_frequency: ReminderFrequency = ReminderFrequency.NEVER

    @field_validator("measurements")
    @classmethod
    def validate_measurements(cls, v):
        return _check_measurements(v)

    @field_validator("birth_date")
    @classmethod
    def not_in_future(cls, v: Optional[date]) -> Optional[date]:
        if v and v > date.today():
            raise ValueError("Birth date cannot be in the future")
        return v


class FamilyProfileUpdate(BaseModel):
    nickname: Optional[str] = Field(None, min_length=1, max_length=50)
    relationship: Optional[RelationshipType] = None
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    avatar_url: Optional[str] = Field(None, max_length=500)
    measurements: Optional[Dict[str, float]] = None
    visibility: Optional[ProfileVisibility] = None
    growth_tracking_enabled: Optional[bool] = None
    reminder_frequency: Optional[ReminderFrequency] = None

    @field_validator("measurements")
    @classmethod
    def validate_measurements(cls, v):
        return _check_measurements(v)


# =====================================================
# RESPONSES
# =====================================================

class GrowthEntryOut(BaseModel):
    recorded_at: datetime
    measurements: Dict[str, float]


class FamilyProfileOut(BaseModel):
    id: int
    user_id: int
    nickname: str
    relationship: RelationshipType
    gender: Gender
    birth_date: Optional[date]
    age: Optional[int]
    avatar_url: Optional[str]
    measurements: Dict[str, float]
    visibility: ProfileVisibility
    growth_tracking_enabled: bool
    reminder_frequency: ReminderFrequency
    last_measurement_update: datetime
    next_reminder_date: Optional[date]
    created_at: datetime


class FamilyProfileListData(BaseModel):
    total: int
    items: List[FamilyProfileOut]


class GrowthHistoryOut(BaseModel):
    profile_id: int
    entries: List[GrowthEntryOut]
