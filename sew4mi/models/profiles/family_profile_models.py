from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Date, DateTime, Boolean, JSON, Index
from sew4mi.core.db import Base
from sew4mi.models.base.mixins import TimestampMixin, SoftDeleteMixin
from sew4mi.models.enums.family_profile import (
    RelationshipType,
    Gender,
    ProfileVisibility,
    ReminderFrequency,
)


class FamilyProfile(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "family_profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    nickname = Column(String(50), nullable=False)
    relationship_type = Column(Enum(RelationshipType), nullable=False)
    gender = Column(Enum(Gender), nullable=False)
    birth_date = Column(Date, nullable=True)
    avatar_url = Column(String(500), nullable=True)

    measurements = Column(JSON, nullable=False, default=dict)
    # [{"recorded_at": iso, "measurements": {...}}], oldest first
    growth_history = Column(JSON, nullable=False, default=list)
    last_measurement_update = Column(DateTime(timezone=True), nullable=False)

    visibility = Column(Enum(ProfileVisibility), nullable=False, default=ProfileVisibility.FAMILY_ONLY)
    growth_tracking_enabled = Column(Boolean, nullable=False, default=False)
    reminder_frequency = Column(Enum(ReminderFrequency), nullable=False, default=ReminderFrequency.NEVER)
    next_reminder_date = Column(Date, nullable=True, index=True)

    __table_args__ = (Index("ix_family_profile_user_active", "user_id", "is_deleted"),)

    def __repr__(self):
        return f"<FamilyProfile id={self.id} user_id={self.user_id} nickname={self.nickname}>"
