from sqlalchemy import Column, Integer, String, Boolean, Numeric, Index
from sqlalchemy.orm import relationship
from sew4mi.core.db import Base
from sew4mi.models.base.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """Marketplace profile of an identity-provider account."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    auth_subject = Column(String(255), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    role = Column(String(50), nullable=False, default="customer", index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # tailor-only settings
    rush_order_fee_percentage = Column(Numeric(5, 2), nullable=True)
    vacation_mode = Column(Boolean, default=False, nullable=False)

    loyalty_account = relationship("LoyaltyAccount", back_populates="user", uselist=False, lazy="noload")

    __table_args__ = (Index("ix_users_role_active", "role", "is_active"),)

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"
