from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Enum, Index, CheckConstraint
from sqlalchemy.orm import relationship
from sew4mi.core.db import Base
from sew4mi.models.base.mixins import TimestampMixin
from sew4mi.models.enums.escrow_stage import EscrowStage, EscrowTransactionType


class EscrowTransaction(Base, TimestampMixin):
    """Ledger row for one escrow movement. Never updated after insert."""

    __tablename__ = "escrow_transactions"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    transaction_type = Column(Enum(EscrowTransactionType), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    from_stage = Column(Enum(EscrowStage), nullable=True)
    to_stage = Column(Enum(EscrowStage), nullable=False)
    external_reference = Column(String(255), nullable=True)
    actor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    notes = Column(String(500), nullable=True)

    order = relationship("Order", back_populates="escrow_transactions", lazy="noload")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_escrow_tx_amount_positive"),
        Index("uq_escrow_tx_order_type", "order_id", "transaction_type", unique=True),
    )

    def __repr__(self):
        return f"<EscrowTransaction id={self.id} order_id={self.order_id} {self.transaction_type} amount={self.amount}>"
