from sqlalchemy import Column, Integer, String, ForeignKey, Enum, DateTime, Text, Index
from sqlalchemy.orm import relationship
from sew4mi.core.db import Base
from sew4mi.models.base.mixins import TimestampMixin
from sew4mi.models.enums.milestone_stage import (
    MilestoneStage,
    MilestoneApprovalStatus,
    MilestoneApprovalAction,
)


class OrderMilestone(Base, TimestampMixin):
    __tablename__ = "order_milestones"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    milestone = Column(Enum(MilestoneStage), nullable=False, index=True)
    photo_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)

    verified_at = Column(DateTime(timezone=True), nullable=False)
    verified_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    approval_status = Column(
        Enum(MilestoneApprovalStatus),
        nullable=False,
        default=MilestoneApprovalStatus.PENDING,
        index=True,
    )
    customer_reviewed_at = Column(DateTime(timezone=True), nullable=True)
    auto_approval_deadline = Column(DateTime(timezone=True), nullable=False, index=True)
    rejection_reason = Column(String(500), nullable=True)

    order = relationship("Order", back_populates="milestones", lazy="noload")
    approvals = relationship(
        "MilestoneApproval",
        back_populates="milestone_ref",
        cascade="all, delete-orphan",
        order_by="MilestoneApproval.reviewed_at",
        lazy="noload",
    )

    __table_args__ = (
        Index("ix_milestone_order_stage", "order_id", "milestone"),
        Index("ix_milestone_status_deadline", "approval_status", "auto_approval_deadline"),
    )

    def __repr__(self):
        return f"<OrderMilestone id={self.id} order_id={self.order_id} {self.milestone} {self.approval_status}>"


class MilestoneApproval(Base):
    """Append-only record of every customer or system decision on a milestone."""

    __tablename__ = "milestone_approvals"

    id = Column(Integer, primary_key=True)
    milestone_id = Column(Integer, ForeignKey("order_milestones.id", ondelete="CASCADE"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(Enum(MilestoneApprovalAction), nullable=False)
    comment = Column(String(500), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=False)

    milestone_ref = relationship("OrderMilestone", back_populates="approvals", lazy="noload")

    def __repr__(self):
        return f"<MilestoneApproval id={self.id} milestone_id={self.milestone_id} action={self.action}>"
