from sqlalchemy import Column, Integer, String, ForeignKey, Enum, DateTime, Text, JSON, Index
from sqlalchemy.orm import relationship
from sew4mi.core.db import Base
from sew4mi.models.base.mixins import TimestampMixin
from sew4mi.models.enums.order_status import OrderStatus
from sew4mi.models.enums.dispute_status import DisputeStatus, DisputeResolutionType


class MilestoneDispute(Base, TimestampMixin):
    __tablename__ = "milestone_disputes"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    milestone_id = Column(Integer, ForeignKey("order_milestones.id", ondelete="CASCADE"), nullable=False, index=True)
    raised_by_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    reason = Column(Text, nullable=False)
    evidence = Column(Text, nullable=True)
    evidence_urls = Column(JSON, nullable=False, default=list)

    status = Column(Enum(DisputeStatus), nullable=False, default=DisputeStatus.OPEN, index=True)
    # order status to restore when production resumes
    previous_order_status = Column(Enum(OrderStatus), nullable=False)

    resolution_type = Column(Enum(DisputeResolutionType), nullable=True)
    outcome = Column(Text, nullable=True)
    reason_code = Column(String(50), nullable=True)
    admin_notes = Column(Text, nullable=True)
    resolved_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    messages = relationship(
        "DisputeMessage",
        back_populates="dispute",
        cascade="all, delete-orphan",
        order_by="DisputeMessage.id",
        lazy="noload",
    )

    __table_args__ = (Index("ix_dispute_order_status", "order_id", "status"),)

    def __repr__(self):
        return f"<MilestoneDispute id={self.id} order_id={self.order_id} status={self.status}>"


class DisputeMessage(Base, TimestampMixin):
    __tablename__ = "dispute_messages"

    id = Column(Integer, primary_key=True)
    dispute_id = Column(Integer, ForeignKey("milestone_disputes.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    sender_role = Column(String(50), nullable=False)
    body = Column(Text, nullable=False)

    dispute = relationship("MilestoneDispute", back_populates="messages", lazy="noload")

    def __repr__(self):
        return f"<DisputeMessage id={self.id} dispute_id={self.dispute_id} sender_id={self.sender_id}>"
