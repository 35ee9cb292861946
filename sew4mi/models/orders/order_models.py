from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Enum, Date, DateTime, Text, Index, CheckConstraint
from sqlalchemy.orm import relationship
from decimal import Decimal
from sew4mi.core.db import Base
from sew4mi.models.base.mixins import TimestampMixin, SoftDeleteMixin, AuditMixin
from sew4mi.models.enums.order_status import OrderStatus, FabricChoice, UrgencyLevel
from sew4mi.models.enums.escrow_stage import EscrowStage


class Order(Base, TimestampMixin, SoftDeleteMixin, AuditMixin):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_number = Column(String(50), nullable=False, unique=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    tailor_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    family_profile_id = Column(Integer, ForeignKey("family_profiles.id", ondelete="SET NULL"), nullable=True, index=True)

    garment_type = Column(String(50), nullable=False)
    fabric_choice = Column(Enum(FabricChoice), nullable=False, default=FabricChoice.CUSTOMER_PROVIDED)
    urgency_level = Column(Enum(UrgencyLevel), nullable=False, default=UrgencyLevel.STANDARD)
    special_instructions = Column(Text, nullable=True)

    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.PENDING_DEPOSIT, index=True)
    version = Column(Integer, nullable=False, default=1)

    base_price = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    fabric_cost = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    urgency_surcharge = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    total_amount = Column(Numeric(12, 2), nullable=False)

    # escrow split, fixed at creation
    deposit_amount = Column(Numeric(12, 2), nullable=False)
    fitting_amount = Column(Numeric(12, 2), nullable=False)
    final_amount = Column(Numeric(12, 2), nullable=False)

    escrow_stage = Column(Enum(EscrowStage), nullable=False, default=EscrowStage.DEPOSIT, index=True)
    deposit_paid = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    fitting_paid = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    final_paid = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    refunded_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    escrow_balance = Column(Numeric(12, 2), nullable=False)

    estimated_delivery = Column(Date, nullable=True)
    actual_delivery = Column(DateTime(timezone=True), nullable=True)

    customer = relationship("User", foreign_keys=[customer_id], lazy="noload")
    tailor = relationship("User", foreign_keys=[tailor_id], lazy="noload")
    family_profile = relationship("FamilyProfile", lazy="noload")
    milestones = relationship(
        "OrderMilestone",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderMilestone.created_at",
        lazy="noload",
    )
    escrow_transactions = relationship(
        "EscrowTransaction",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="EscrowTransaction.id",
        lazy="noload",
    )
    messages = relationship("OrderMessage", back_populates="order", cascade="all, delete-orphan", lazy="noload")

    __table_args__ = (
        Index("ix_order_customer_status", "customer_id", "status"),
        Index("ix_order_tailor_status", "tailor_id", "status"),
        CheckConstraint("total_amount > 0", name="ck_order_total_positive"),
        CheckConstraint(
            "deposit_amount + fitting_amount + final_amount = total_amount",
            name="ck_order_escrow_split",
        ),
        CheckConstraint("customer_id <> tailor_id", name="ck_order_distinct_parties"),
    )

    def __repr__(self):
        return f"<Order {self.order_number} status={self.status} escrow={self.escrow_stage}>"
