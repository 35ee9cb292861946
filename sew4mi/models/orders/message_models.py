from sqlalchemy import Column, Integer, ForeignKey, DateTime, Text, Index
from sqlalchemy.orm import relationship
from sew4mi.core.db import Base
from sew4mi.models.base.mixins import TimestampMixin


class OrderMessage(Base, TimestampMixin):
    __tablename__ = "order_messages"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    body = Column(Text, nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)

    order = relationship("Order", back_populates="messages", lazy="noload")
    sender = relationship("User", lazy="selectin")

    __table_args__ = (Index("ix_order_message_order_created", "order_id", "created_at"),)

    def __repr__(self):
        return f"<OrderMessage id={self.id} order_id={self.order_id} sender_id={self.sender_id}>"
