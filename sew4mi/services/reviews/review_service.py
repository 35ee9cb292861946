# sew4mi/services/reviews/review_service.py

from datetime import datetime, timedelta
from decimal import Decimal
import logging
import math
import re

from sqlalchemy import select, func, desc, asc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sew4mi.models.reviews.review_models import Review, ReviewVote, ReviewResponse
from sew4mi.models.orders.order_models import Order
from sew4mi.models.users.user_models import User
from sew4mi.models.enums.order_status import OrderStatus
from sew4mi.models.enums.review_status import ModerationStatus, VoteType, ReviewIneligibilityReason

from sew4mi.schemas.reviews.review_schemas import (
    ReviewCreate,
    ReviewVoteCreate,
    ReviewResponseCreate,
    ReviewModerate,
    ReviewOut,
    ReviewListData,
    ReviewEligibilityOut,
    TailorRatingSummary,
)

from sew4mi.core.config import REVIEW_WINDOW_DAYS
from sew4mi.core.exceptions import AppException
from sew4mi.constants.error_codes import ErrorCode
from sew4mi.constants.activity_codes import ActivityCode
from sew4mi.constants.reviews import (
    MAX_LINKS_IN_REVIEW,
    CAPS_RATIO_THRESHOLD,
    CAPS_MIN_LETTERS,
    RESPONSE_MIN_LENGTH,
    RESPONSE_MAX_LENGTH,
)
from sew4mi.utils.activity_helpers import emit_activity, actor_context
from sew4mi.utils.datetime_utils import utcnow, ensure_utc

logger = logging.getLogger(__name__)

LINK_PATTERN = re.compile(r"https?://|www\.", re.IGNORECASE)

CATEGORY_FIELDS = ("fit_rating", "quality_rating", "communication_rating", "timeliness_rating")


# =====================================================
# PURE HELPERS
# =====================================================
def calculate_category_average(ratings: dict) -> Decimal | None:
    given = [v for v in ratings.values() if v is not None]
    if not given:
        return None
    return (Decimal(sum(given)) / Decimal(len(given))).quantize(Decimal("0.01"))


def auto_moderate(text: str | None) -> tuple[ModerationStatus, str | None]:
    if not text:
        return ModerationStatus.APPROVED, None

    if len(LINK_PATTERN.findall(text)) > MAX_LINKS_IN_REVIEW:
        return ModerationStatus.FLAGGED, "Contains too many links"

    letters = [c for c in text if c.isalpha()]
    if len(letters) >= CAPS_MIN_LETTERS:
        upper = sum(1 for c in letters if c.isupper())
        if upper / len(letters) >= CAPS_RATIO_THRESHOLD:
            return ModerationStatus.FLAGGED, "Excessive capital letters"

    return ModerationStatus.APPROVED, None


# =====================================================
# ELIGIBILITY
# =====================================================
def _eligibility(order: Order, has_review: bool, now: datetime) -> ReviewEligibilityOut:
    def reject(reason):
        return ReviewEligibilityOut(order_id=order.id, eligible=False, reason=reason)

    if order.status == OrderStatus.DISPUTED:
        return reject(ReviewIneligibilityReason.DISPUTED)
    if order.status == OrderStatus.CANCELLED:
        return reject(ReviewIneligibilityReason.CANCELLED)
    if order.status != OrderStatus.DELIVERED or order.actual_delivery is None:
        return reject(ReviewIneligibilityReason.NOT_DELIVERED)
    if has_review:
        return reject(ReviewIneligibilityReason.ALREADY_REVIEWED)

    window_end = ensure_utc(order.actual_delivery) + timedelta(days=REVIEW_WINDOW_DAYS)
    if now > window_end:
        return reject(ReviewIneligibilityReason.TIME_EXPIRED)

    days_remaining = math.ceil((window_end - now).total_seconds() / 86400)
    return ReviewEligibilityOut(order_id=order.id, eligible=True, days_remaining=days_remaining)


async def check_review_eligibility(
    db: AsyncSession,
    order_id: int,
    user: User,
    now: datetime | None = None,
) -> ReviewEligibilityOut:
    order = await db.get(Order, order_id)
    if order is None or order.is_deleted:
        return ReviewEligibilityOut(order_id=order_id, eligible=False, reason=ReviewIneligibilityReason.NOT_FOUND)

    if order.customer_id != user.id:
        raise AppException(403, "Only the customer can review this order", ErrorCode.ORDER_ACCESS_DENIED)

    has_review = bool(
        await db.scalar(select(Review.id).where(Review.order_id == order.id))
    )
    return _eligibility(order, has_review, ensure_utc(now) or utcnow())


# =====================================================
# SUBMIT
# =====================================================
async def submit_review(
    db: AsyncSession,
    payload: ReviewCreate,
    user: User,
    now: datetime | None = None,
) -> ReviewOut:
    eligibility = await check_review_eligibility(db, payload.order_id, user, now=now)
    if not eligibility.eligible:
        raise AppException(
            409 if eligibility.reason == ReviewIneligibilityReason.ALREADY_REVIEWED else 400,
            "This order cannot be reviewed",
            ErrorCode.REVIEW_NOT_ELIGIBLE,
            {"reason": eligibility.reason.value},
        )

    order = await db.get(Order, payload.order_id)

    ratings = {field: getattr(payload, field) for field in CATEGORY_FIELDS}
    text = payload.review_text.strip() if payload.review_text else None
    status, reason = auto_moderate(text)

    review = Review(
        order_id=order.id,
        customer_id=user.id,
        tailor_id=order.tailor_id,
        rating=payload.rating,
        category_average=calculate_category_average(ratings),
        review_text=text,
        moderation_status=status,
        moderation_reason=reason,
        helpful_count=0,
        unhelpful_count=0,
        **ratings,
    )
    db.add(review)
    await db.flush()

    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=ActivityCode.SUBMIT_REVIEW,
        target_name=order.order_number,
        rating=payload.rating,
        **actor_context(user),
    )

    result = _map_review(review)
    await db.commit()

    if status == ModerationStatus.FLAGGED:
        logger.warning("Review flagged by auto-moderation", extra={"review_id": review.id, "reason": reason})

    logger.info("Review submitted", extra={"review_id": review.id, "order_id": order.id})
    return result


def _map_review(review: Review) -> ReviewOut:
    return ReviewOut.model_validate(review)


async def _load_review(db: AsyncSession, review_id: int) -> Review:
    result = await db.execute(
        select(Review)
        .options(selectinload(Review.response))
        .where(Review.id == review_id, Review.is_deleted.is_(False))
    )
    review = result.scalar_one_or_none()
    if not review:
        raise AppException(404, "Review not found", ErrorCode.REVIEW_NOT_FOUND)
    return review


# =====================================================
# VOTES
# =====================================================
async def vote_on_review(
    db: AsyncSession,
    review_id: int,
    payload: ReviewVoteCreate,
    user: User,
) -> ReviewOut:
    review = await _load_review(db, review_id)

    if review.customer_id == user.id:
        raise AppException(400, "You cannot vote on your own review", ErrorCode.VALIDATION_ERROR)

    vote = await db.scalar(
        select(ReviewVote).where(
            ReviewVote.review_id == review.id,
            ReviewVote.user_id == user.id,
        )
    )

    if vote is None:
        db.add(ReviewVote(review_id=review.id, user_id=user.id, vote_type=payload.vote_type))
        _bump(review, payload.vote_type, 1)
    elif vote.vote_type != payload.vote_type:
        _bump(review, vote.vote_type, -1)
        _bump(review, payload.vote_type, 1)
        vote.vote_type = payload.vote_type

    await db.flush()
    result = _map_review(review)
    await db.commit()
    return result


def _bump(review: Review, vote_type: VoteType, delta: int) -> None:
    if vote_type == VoteType.HELPFUL:
        review.helpful_count = max(0, review.helpful_count + delta)
    else:
        review.unhelpful_count = max(0, review.unhelpful_count + delta)


# =====================================================
# TAILOR RESPONSE
# =====================================================
async def respond_to_review(
    db: AsyncSession,
    review_id: int,
    payload: ReviewResponseCreate,
    user: User,
) -> ReviewOut:
    review = await _load_review(db, review_id)

    if review.tailor_id != user.id:
        raise AppException(403, "Only the reviewed tailor can respond", ErrorCode.PERMISSION_DENIED)

    if review.response is not None:
        raise AppException(409, "This review already has a response", ErrorCode.REVIEW_RESPONSE_EXISTS)

    text = payload.response_text.strip()
    if not RESPONSE_MIN_LENGTH <= len(text) <= RESPONSE_MAX_LENGTH:
        raise AppException(
            400,
            f"Response must be {RESPONSE_MIN_LENGTH}-{RESPONSE_MAX_LENGTH} characters",
            ErrorCode.VALIDATION_ERROR,
        )

    review.response = ReviewResponse(tailor_id=user.id, response_text=text)
    await db.flush()

    result = _map_review(review)
    await db.commit()

    logger.info("Review response added", extra={"review_id": review.id, "tailor_id": user.id})
    return result


# =====================================================
# MODERATION (ADMIN)
# =====================================================
async def moderate_review(
    db: AsyncSession,
    review_id: int,
    payload: ReviewModerate,
    user: User,
) -> ReviewOut:
    review = await _load_review(db, review_id)

    review.moderation_status = payload.status
    review.moderation_reason = payload.reason

    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=ActivityCode.MODERATE_REVIEW,
        target_name=str(review.id),
        status=payload.status.value,
        **actor_context(user),
    )

    await db.flush()
    result = _map_review(review)
    await db.commit()

    logger.info(
        "Review moderated",
        extra={"review_id": review.id, "status": payload.status, "admin_id": user.id},
    )
    return result


# =====================================================
# LISTING + SUMMARY
# =====================================================
async def list_tailor_reviews(
    db: AsyncSession,
    tailor_id: int,
    *,
    page: int = 1,
    page_size: int = 20,
    sort_by: str = "created_at",
    order: str = "desc",
) -> ReviewListData:
    base_query = select(Review).where(
        Review.tailor_id == tailor_id,
        Review.moderation_status == ModerationStatus.APPROVED,
        Review.is_deleted.is_(False),
    )

    total = await db.scalar(
        select(func.count()).select_from(base_query.subquery())
    )

    sort_map = {
        "created_at": Review.created_at,
        "rating": Review.rating,
        "helpful": Review.helpful_count,
    }
    sort_col = sort_map.get(sort_by, Review.created_at)

    result = await db.execute(
        base_query
        .options(selectinload(Review.response))
        .order_by(asc(sort_col) if order == "asc" else desc(sort_col))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return ReviewListData(
        total=total or 0,
        items=[_map_review(r) for r in result.scalars().all()],
    )


async def get_tailor_rating_summary(db: AsyncSession, tailor_id: int) -> TailorRatingSummary:
    result = await db.execute(
        select(Review.rating, func.count(Review.id))
        .where(
            Review.tailor_id == tailor_id,
            Review.moderation_status == ModerationStatus.APPROVED,
            Review.is_deleted.is_(False),
        )
        .group_by(Review.rating)
    )

    distribution = {star: 0 for star in range(1, 6)}
    for rating, count in result.all():
        distribution[rating] = count

    total = sum(distribution.values())
    average = Decimal("0.00")
    if total:
        weighted = sum(star * count for star, count in distribution.items())
        average = (Decimal(weighted) / Decimal(total)).quantize(Decimal("0.01"))

    return TailorRatingSummary(
        tailor_id=tailor_id,
        average_rating=average,
        total_reviews=total,
        distribution=distribution,
    )
