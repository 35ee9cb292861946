# sew4mi/services/orders/milestone_service.py

from datetime import datetime, timedelta
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.models.orders.order_models import Order
from sew4mi.models.orders.milestone_models import OrderMilestone, MilestoneApproval
from sew4mi.models.users.user_models import User
from sew4mi.models.enums.milestone_stage import (
    MilestoneStage,
    MilestoneApprovalStatus,
    MilestoneApprovalAction,
)
from sew4mi.models.enums.order_status import OrderStatus
from sew4mi.models.enums.escrow_stage import EscrowStage

from sew4mi.schemas.orders.milestone_schemas import (
    MilestoneSubmit,
    MilestoneReview,
    MilestoneOut,
    MilestoneApprovalOut,
    MilestoneReviewResult,
    AutoApprovalResult,
)

from sew4mi.core.config import MILESTONE_AUTO_APPROVAL_HOURS
from sew4mi.core.exceptions import AppException
from sew4mi.constants.error_codes import ErrorCode
from sew4mi.constants.activity_codes import ActivityCode
from sew4mi.utils.activity_helpers import emit_activity, actor_context
from sew4mi.utils.datetime_utils import utcnow, ensure_utc
from sew4mi.services.orders.order_lookup import (
    load_order,
    ensure_order_party,
    sync_order_status,
    CLOSED_STATUSES,
)
from sew4mi.services.orders.order_progress import calculate_order_progress
from sew4mi.services.payments.escrow_service import release_stage_payment
from sew4mi.services.payments.escrow_calculator import EscrowCalculationError

logger = logging.getLogger(__name__)

# approving these stages pays the tailor the matching escrow share
PAYMENT_STAGES = {
    MilestoneStage.FITTING_READY: EscrowStage.FITTING,
    MilestoneStage.READY_FOR_DELIVERY: EscrowStage.FINAL,
}


async def _order_milestones(db: AsyncSession, order_id: int) -> list[OrderMilestone]:
    result = await db.execute(
        select(OrderMilestone)
        .where(OrderMilestone.order_id == order_id)
        .order_by(OrderMilestone.created_at, OrderMilestone.id)
    )
    return list(result.scalars().all())


async def _load_milestone(db: AsyncSession, milestone_id: int) -> OrderMilestone:
    milestone = await db.get(OrderMilestone, milestone_id)
    if not milestone:
        raise AppException(404, "Milestone not found", ErrorCode.MILESTONE_NOT_FOUND)
    return milestone


# =====================================================
# SUBMIT (TAILOR)
# =====================================================
async def submit_milestone(
    db: AsyncSession,
    order_id: int,
    payload: MilestoneSubmit,
    user: User,
) -> MilestoneOut:
    order = await load_order(db, order_id)

    if order.tailor_id != user.id:
        raise AppException(403, "Only the assigned tailor can submit milestones", ErrorCode.ORDER_ACCESS_DENIED)

    if order.status in CLOSED_STATUSES or order.deposit_paid < order.deposit_amount:
        raise AppException(
            409,
            "Milestones can only be submitted for active orders with a paid deposit",
            ErrorCode.ORDER_INVALID_STATE,
        )

    existing = await db.scalar(
        select(OrderMilestone.id).where(
            OrderMilestone.order_id == order.id,
            OrderMilestone.milestone == payload.milestone,
            OrderMilestone.approval_status.in_(
                [MilestoneApprovalStatus.PENDING, MilestoneApprovalStatus.APPROVED]
            ),
        )
    )
    if existing:
        raise AppException(
            409,
            f"Milestone {payload.milestone.value} is already submitted for this order",
            ErrorCode.MILESTONE_DUPLICATE,
        )

    now = utcnow()
    milestone = OrderMilestone(
        order_id=order.id,
        milestone=payload.milestone,
        photo_url=payload.photo_url,
        notes=payload.notes,
        verified_at=now,
        verified_by_id=user.id,
        approval_status=MilestoneApprovalStatus.PENDING,
        auto_approval_deadline=now + timedelta(hours=MILESTONE_AUTO_APPROVAL_HOURS),
    )
    db.add(milestone)
    await db.flush()

    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=ActivityCode.SUBMIT_MILESTONE,
        target_name=order.order_number,
        milestone=payload.milestone.value,
        **actor_context(user),
    )

    result = MilestoneOut.model_validate(milestone)
    await db.commit()

    logger.info(
        "Milestone submitted",
        extra={"order_id": order.id, "milestone": payload.milestone, "milestone_id": milestone.id},
    )
    return result


# =====================================================
# APPROVAL SIDE EFFECTS
# =====================================================
async def _apply_approval(
    db: AsyncSession,
    order: Order,
    milestone: OrderMilestone,
    actor: User | None,
) -> tuple[OrderStatus, int, bool]:
    milestones = await _order_milestones(db, order.id)
    status = sync_order_status(order, milestones)
    progress = calculate_order_progress(milestones)

    payment_triggered = False
    escrow_stage = PAYMENT_STAGES.get(milestone.milestone)
    if escrow_stage is not None:
        try:
            tx = await release_stage_payment(db, order, escrow_stage, actor=actor)
            payment_triggered = tx is not None
        except (AppException, EscrowCalculationError) as e:
            # the approval stands; reconciliation picks up the missed release
            logger.error(
                "Escrow release failed after milestone approval",
                extra={
                    "order_id": order.id,
                    "milestone_id": milestone.id,
                    "escrow_stage": escrow_stage,
                    "error": str(e),
                },
            )

    return status, progress, payment_triggered


# =====================================================
# BULK TRANSITIONS (CANCEL / DISPUTE)
# =====================================================
async def _pending_milestones(db: AsyncSession, order_id: int) -> list[OrderMilestone]:
    result = await db.execute(
        select(OrderMilestone).where(
            OrderMilestone.order_id == order_id,
            OrderMilestone.approval_status == MilestoneApprovalStatus.PENDING,
        )
    )
    return list(result.scalars().all())


async def reject_pending_milestones(
    db: AsyncSession,
    order: Order,
    reason: str,
    *,
    actor: User | None = None,
    now: datetime | None = None,
) -> int:
    """Close every PENDING milestone of a terminated order. Does not commit."""
    now = ensure_utc(now) or utcnow()
    pending = await _pending_milestones(db, order.id)

    for milestone in pending:
        milestone.approval_status = MilestoneApprovalStatus.REJECTED
        milestone.customer_reviewed_at = now
        milestone.rejection_reason = reason
        db.add(
            MilestoneApproval(
                milestone_id=milestone.id,
                order_id=order.id,
                customer_id=actor.id if actor and actor.id == order.customer_id else None,
                action=MilestoneApprovalAction.REJECTED,
                comment=reason,
                reviewed_at=now,
            )
        )

    if pending:
        logger.info(
            "Pending milestones closed",
            extra={"order_id": order.id, "count": len(pending), "reason": reason},
        )
    return len(pending)


async def reopen_review_windows(
    db: AsyncSession,
    order: Order,
    now: datetime | None = None,
) -> int:
    """Restart the auto-approval clock of PENDING milestones. Does not commit."""
    now = ensure_utc(now) or utcnow()
    pending = await _pending_milestones(db, order.id)

    for milestone in pending:
        milestone.auto_approval_deadline = now + timedelta(hours=MILESTONE_AUTO_APPROVAL_HOURS)

    return len(pending)


# =====================================================
# REVIEW (CUSTOMER)
# =====================================================
async def review_milestone(
    db: AsyncSession,
    milestone_id: int,
    payload: MilestoneReview,
    user: User,
    now: datetime | None = None,
) -> MilestoneReviewResult:
    milestone = await _load_milestone(db, milestone_id)
    order = await load_order(db, milestone.order_id, for_update=True)

    if order.customer_id != user.id:
        raise AppException(403, "Only the customer can review milestones", ErrorCode.ORDER_ACCESS_DENIED)

    if order.status in CLOSED_STATUSES:
        raise AppException(
            409,
            f"Milestones cannot be reviewed while the order is {order.status.value}",
            ErrorCode.ORDER_INVALID_STATE,
        )

    if milestone.approval_status != MilestoneApprovalStatus.PENDING:
        raise AppException(
            409,
            "Milestone has already been reviewed",
            ErrorCode.MILESTONE_ALREADY_REVIEWED,
        )

    now = ensure_utc(now) or utcnow()
    if now > ensure_utc(milestone.auto_approval_deadline):
        raise AppException(
            409,
            "The review window for this milestone has closed",
            ErrorCode.MILESTONE_DEADLINE_PASSED,
        )

    approved = payload.action == MilestoneApprovalAction.APPROVED.value
    comment = payload.comment.strip() if payload.comment else None

    milestone.approval_status = (
        MilestoneApprovalStatus.APPROVED if approved else MilestoneApprovalStatus.REJECTED
    )
    milestone.customer_reviewed_at = now
    milestone.rejection_reason = None if approved else comment

    db.add(
        MilestoneApproval(
            milestone_id=milestone.id,
            order_id=order.id,
            customer_id=user.id,
            action=MilestoneApprovalAction.APPROVED if approved else MilestoneApprovalAction.REJECTED,
            comment=comment,
            reviewed_at=now,
        )
    )
    await db.flush()

    status, progress, payment_triggered = await _apply_approval(db, order, milestone, user)

    context = {"milestone": milestone.milestone.value}
    if not approved:
        context["reason"] = comment

    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=ActivityCode.APPROVE_MILESTONE if approved else ActivityCode.REJECT_MILESTONE,
        target_name=order.order_number,
        **context,
        **actor_context(user),
    )

    result = MilestoneReviewResult(
        milestone=MilestoneOut.model_validate(milestone),
        order_status=status.value,
        progress_percentage=progress,
        payment_triggered=payment_triggered,
    )
    await db.commit()

    logger.info(
        "Milestone reviewed",
        extra={
            "milestone_id": milestone.id,
            "order_id": order.id,
            "action": payload.action,
            "payment_triggered": payment_triggered,
        },
    )
    return result


# =====================================================
# AUTO APPROVAL (SCHEDULER)
# =====================================================
async def _auto_approve_one(db: AsyncSession, milestone_id: int, now: datetime) -> bool:
    milestone = await _load_milestone(db, milestone_id)
    if milestone.approval_status != MilestoneApprovalStatus.PENDING:
        return False

    order = await load_order(db, milestone.order_id, for_update=True)

    if order.status in CLOSED_STATUSES:
        logger.info(
            "Skipping auto-approval on closed order",
            extra={"milestone_id": milestone.id, "order_id": order.id, "order_status": order.status},
        )
        return False

    milestone.approval_status = MilestoneApprovalStatus.APPROVED
    milestone.customer_reviewed_at = now

    db.add(
        MilestoneApproval(
            milestone_id=milestone.id,
            order_id=order.id,
            customer_id=None,
            action=MilestoneApprovalAction.AUTO_APPROVED,
            comment="Automatically approved after review deadline",
            reviewed_at=now,
        )
    )
    await db.flush()

    await _apply_approval(db, order, milestone, None)

    await emit_activity(
        db,
        user_id=None,
        username="system",
        code=ActivityCode.AUTO_APPROVE_MILESTONE,
        target_name=order.order_number,
        milestone=milestone.milestone.value,
    )

    await db.commit()
    return True


async def auto_approve_expired_milestones(
    db: AsyncSession,
    now: datetime | None = None,
) -> AutoApprovalResult:
    now = ensure_utc(now) or utcnow()

    result = await db.execute(
        select(OrderMilestone.id)
        .join(Order, Order.id == OrderMilestone.order_id)
        .where(
            OrderMilestone.approval_status == MilestoneApprovalStatus.PENDING,
            OrderMilestone.auto_approval_deadline < now,
            Order.status.not_in(list(CLOSED_STATUSES)),
            Order.is_deleted.is_(False),
        )
        .order_by(OrderMilestone.auto_approval_deadline)
    )
    milestone_ids = list(result.scalars().all())

    approved = 0
    failed = 0

    for milestone_id in milestone_ids:
        try:
            if await _auto_approve_one(db, milestone_id, now):
                approved += 1
        except Exception:
            failed += 1
            await db.rollback()
            logger.exception(
                "Auto-approval failed",
                extra={"milestone_id": milestone_id},
            )

    logger.info(
        "Milestone auto-approval run finished",
        extra={"processed": len(milestone_ids), "approved": approved, "failed": failed},
    )

    return AutoApprovalResult(
        processed=len(milestone_ids),
        approved=approved,
        failed=failed,
    )


# =====================================================
# READ
# =====================================================
async def list_order_milestones(
    db: AsyncSession,
    order_id: int,
    user: User,
) -> list[MilestoneOut]:
    order = await load_order(db, order_id)
    ensure_order_party(order, user)

    return [MilestoneOut.model_validate(m) for m in await _order_milestones(db, order.id)]


async def get_milestone_approval_history(
    db: AsyncSession,
    milestone_id: int,
    user: User,
) -> list[MilestoneApprovalOut]:
    milestone = await _load_milestone(db, milestone_id)
    order = await load_order(db, milestone.order_id)
    ensure_order_party(order, user)

    result = await db.execute(
        select(MilestoneApproval)
        .where(MilestoneApproval.milestone_id == milestone.id)
        .order_by(MilestoneApproval.reviewed_at, MilestoneApproval.id)
    )
    return [MilestoneApprovalOut.model_validate(a) for a in result.scalars().all()]
