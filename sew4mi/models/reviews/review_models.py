from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Enum, Text, Index, CheckConstraint
from sqlalchemy.orm import relationship
from sew4mi.core.db import Base
from sew4mi.models.base.mixins import TimestampMixin, SoftDeleteMixin
from sew4mi.models.enums.review_status import ModerationStatus, VoteType


class Review(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    tailor_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    rating = Column(Integer, nullable=False)
    fit_rating = Column(Integer, nullable=True)
    quality_rating = Column(Integer, nullable=True)
    communication_rating = Column(Integer, nullable=True)
    timeliness_rating = Column(Integer, nullable=True)
    category_average = Column(Numeric(3, 2), nullable=True)

    review_text = Column(Text, nullable=True)
    moderation_status = Column(
        Enum(ModerationStatus),
        nullable=False,
        default=ModerationStatus.PENDING,
        index=True,
    )
    moderation_reason = Column(String(255), nullable=True)
    helpful_count = Column(Integer, nullable=False, default=0)
    unhelpful_count = Column(Integer, nullable=False, default=0)

    votes = relationship("ReviewVote", back_populates="review", cascade="all, delete-orphan", lazy="noload")
    response = relationship(
        "ReviewResponse",
        back_populates="review",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="noload",
    )

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_review_rating_range"),
        Index("ix_review_tailor_status", "tailor_id", "moderation_status"),
    )

    def __repr__(self):
        return f"<Review id={self.id} order_id={self.order_id} rating={self.rating} status={self.moderation_status}>"


class ReviewVote(Base, TimestampMixin):
    __tablename__ = "review_votes"

    id = Column(Integer, primary_key=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    vote_type = Column(Enum(VoteType), nullable=False)

    review = relationship("Review", back_populates="votes", lazy="noload")

    __table_args__ = (Index("uq_review_vote_user", "review_id", "user_id", unique=True),)

    def __repr__(self):
        return f"<ReviewVote review_id={self.review_id} user_id={self.user_id} {self.vote_type}>"


class ReviewResponse(Base, TimestampMixin):
    __tablename__ = "review_responses"

    id = Column(Integer, primary_key=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    tailor_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    response_text = Column(Text, nullable=False)

    review = relationship("Review", back_populates="response", lazy="noload")

    def __repr__(self):
        return f"<ReviewResponse review_id={self.review_id} tailor_id={self.tailor_id}>"
