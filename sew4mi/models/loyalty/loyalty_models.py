from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Enum, Boolean, Index, CheckConstraint
from sqlalchemy.orm import relationship
from sew4mi.core.db import Base
from sew4mi.models.base.mixins import TimestampMixin, AuditMixin
from sew4mi.models.enums.loyalty_tier import LoyaltyTier, LoyaltyTransactionType, RewardType


class LoyaltyAccount(Base, TimestampMixin):
    __tablename__ = "loyalty_accounts"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    total_points = Column(Integer, nullable=False, default=0)
    available_points = Column(Integer, nullable=False, default=0)
    lifetime_points = Column(Integer, nullable=False, default=0)
    tier = Column(Enum(LoyaltyTier), nullable=False, default=LoyaltyTier.BRONZE, index=True)
    completed_orders = Column(Integer, nullable=False, default=0)

    user = relationship("User", back_populates="loyalty_account", lazy="noload")

    __table_args__ = (
        CheckConstraint("available_points >= 0", name="ck_loyalty_available_non_negative"),
        CheckConstraint("lifetime_points >= 0", name="ck_loyalty_lifetime_non_negative"),
    )

    def __repr__(self):
        return f"<LoyaltyAccount user_id={self.user_id} tier={self.tier} available={self.available_points}>"


class LoyaltyTransaction(Base, TimestampMixin):
    __tablename__ = "loyalty_transactions"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("loyalty_accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)
    reward_id = Column(Integer, ForeignKey("loyalty_rewards.id", ondelete="SET NULL"), nullable=True, index=True)
    transaction_type = Column(Enum(LoyaltyTransactionType), nullable=False, index=True)
    points = Column(Integer, nullable=False)
    description = Column(String(255), nullable=False)

    __table_args__ = (
        CheckConstraint("points <> 0", name="ck_loyalty_tx_points_non_zero"),
        Index("ix_loyalty_tx_account_created", "account_id", "created_at"),
    )

    def __repr__(self):
        return f"<LoyaltyTransaction id={self.id} {self.transaction_type} points={self.points}>"


class LoyaltyReward(Base, TimestampMixin, AuditMixin):
    __tablename__ = "loyalty_rewards"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(String(255), nullable=True)
    points_cost = Column(Integer, nullable=False)
    reward_type = Column(Enum(RewardType), nullable=False)
    discount_percentage = Column(Numeric(5, 2), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    __table_args__ = (
        CheckConstraint("points_cost > 0", name="ck_reward_cost_positive"),
        CheckConstraint(
            "discount_percentage IS NULL OR (discount_percentage > 0 AND discount_percentage <= 100)",
            name="ck_reward_discount_range",
        ),
    )

    def __repr__(self):
        return f"<LoyaltyReward id={self.id} name={self.name} cost={self.points_cost}>"
