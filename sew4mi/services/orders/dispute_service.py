# sew4mi/services/orders/dispute_service.py

from decimal import Decimal
import logging

from sqlalchemy import select, asc
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.models.orders.order_models import Order
from sew4mi.models.orders.milestone_models import OrderMilestone
from sew4mi.models.orders.dispute_models import MilestoneDispute, DisputeMessage
from sew4mi.models.users.user_models import User
from sew4mi.models.enums.milestone_stage import MilestoneApprovalStatus
from sew4mi.models.enums.order_status import OrderStatus
from sew4mi.models.enums.dispute_status import DisputeStatus, DisputeResolutionType

from sew4mi.schemas.orders.dispute_schemas import (
    DisputeCreate,
    DisputeResolve,
    DisputeMessageCreate,
    DisputeOut,
    DisputeResolutionResult,
    DisputeMessageOut,
)

from sew4mi.core.exceptions import AppException
from sew4mi.constants.error_codes import ErrorCode
from sew4mi.constants.activity_codes import ActivityCode
from sew4mi.utils.activity_helpers import emit_activity, actor_context
from sew4mi.utils.datetime_utils import utcnow
from sew4mi.services.orders.order_lookup import (
    load_order,
    ensure_order_party,
    sync_order_status,
    CLOSED_STATUSES,
)
from sew4mi.services.orders.milestone_service import (
    reject_pending_milestones,
    reopen_review_windows,
)
from sew4mi.services.payments.escrow_service import refund_deposit

logger = logging.getLogger(__name__)

DISPUTABLE_MILESTONE_STATUSES = {
    MilestoneApprovalStatus.PENDING,
    MilestoneApprovalStatus.REJECTED,
}


async def _load_dispute(db: AsyncSession, dispute_id: int) -> MilestoneDispute:
    dispute = await db.get(MilestoneDispute, dispute_id)
    if not dispute:
        raise AppException(404, "Dispute not found", ErrorCode.DISPUTE_NOT_FOUND)
    return dispute


async def _load_visible_dispute(
    db: AsyncSession,
    dispute_id: int,
    user: User,
) -> tuple[MilestoneDispute, Order]:
    dispute = await _load_dispute(db, dispute_id)
    order = await load_order(db, dispute.order_id)
    ensure_order_party(order, user)
    return dispute, order


def _ensure_open(dispute: MilestoneDispute) -> None:
    if dispute.status != DisputeStatus.OPEN:
        raise AppException(
            409,
            "Dispute has already been resolved",
            ErrorCode.DISPUTE_ALREADY_RESOLVED,
        )


# =====================================================
# OPEN (CUSTOMER / TAILOR)
# =====================================================
async def open_milestone_dispute(
    db: AsyncSession,
    payload: DisputeCreate,
    user: User,
) -> DisputeOut:
    """
    Raise a dispute on a pending or rejected milestone.

    The order moves to DISPUTED, which stops milestone reviews, the
    auto-approval job and escrow releases until an admin resolves it.
    """
    milestone = await db.get(OrderMilestone, payload.milestone_id)
    if not milestone:
        raise AppException(404, "Milestone not found", ErrorCode.MILESTONE_NOT_FOUND)

    order = await load_order(db, milestone.order_id, for_update=True)

    if user.id not in (order.customer_id, order.tailor_id):
        raise AppException(403, "Only the customer or tailor can dispute a milestone", ErrorCode.ORDER_ACCESS_DENIED)

    if milestone.approval_status not in DISPUTABLE_MILESTONE_STATUSES:
        raise AppException(
            409,
            "Only pending or rejected milestones can be disputed",
            ErrorCode.DISPUTE_NOT_ALLOWED,
        )

    open_dispute = await db.scalar(
        select(MilestoneDispute.id).where(
            MilestoneDispute.order_id == order.id,
            MilestoneDispute.status == DisputeStatus.OPEN,
        )
    )
    if open_dispute:
        raise AppException(
            409,
            "This order already has an open dispute",
            ErrorCode.DISPUTE_ALREADY_OPEN,
            {"dispute_id": open_dispute},
        )

    if order.status in CLOSED_STATUSES or order.status == OrderStatus.PENDING_DEPOSIT:
        raise AppException(
            409,
            f"Orders in status {order.status.value} cannot be disputed",
            ErrorCode.ORDER_INVALID_STATE,
        )

    dispute = MilestoneDispute(
        order_id=order.id,
        milestone_id=milestone.id,
        raised_by_id=user.id,
        reason=payload.reason,
        evidence=payload.evidence,
        evidence_urls=list(payload.evidence_urls),
        status=DisputeStatus.OPEN,
        previous_order_status=order.status,
    )
    db.add(dispute)

    order.status = OrderStatus.DISPUTED
    order.version += 1
    order.updated_by_id = user.id

    await db.flush()

    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=ActivityCode.OPEN_DISPUTE,
        target_name=order.order_number,
        milestone=milestone.milestone.value,
        **actor_context(user),
    )

    result = DisputeOut.model_validate(dispute)
    await db.commit()

    logger.info(
        "Milestone dispute opened",
        extra={"dispute_id": dispute.id, "order_id": order.id, "milestone_id": milestone.id},
    )
    return result


# =====================================================
# RESOLVE (ADMIN)
# =====================================================
async def resolve_dispute(
    db: AsyncSession,
    dispute_id: int,
    payload: DisputeResolve,
    user: User,
) -> DisputeResolutionResult:
    dispute = await _load_dispute(db, dispute_id)
    _ensure_open(dispute)

    order = await load_order(db, dispute.order_id, for_update=True)
    now = utcnow()
    refunded = Decimal("0.00")

    if payload.resolution_type == DisputeResolutionType.FULL_REFUND:
        tx = await refund_deposit(db, order, actor=user, reason=payload.outcome)
        if tx is not None:
            refunded = tx.amount
        await reject_pending_milestones(db, order, "Order refunded after dispute", actor=user, now=now)
        order.status = OrderStatus.CANCELLED
    else:
        order.status = dispute.previous_order_status
        rows = await db.execute(
            select(OrderMilestone).where(OrderMilestone.order_id == order.id)
        )
        sync_order_status(order, list(rows.scalars().all()))
        # pending milestones get a full review window again
        await reopen_review_windows(db, order, now)

    order.version += 1
    order.updated_by_id = user.id

    dispute.status = DisputeStatus.RESOLVED
    dispute.resolution_type = payload.resolution_type
    dispute.outcome = payload.outcome
    dispute.reason_code = payload.reason_code
    dispute.admin_notes = payload.admin_notes
    dispute.resolved_by_id = user.id
    dispute.resolved_at = now

    await db.flush()

    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=ActivityCode.RESOLVE_DISPUTE,
        target_name=order.order_number,
        resolution=payload.resolution_type.value,
        **actor_context(user),
    )

    result = DisputeResolutionResult(
        dispute=DisputeOut.model_validate(dispute),
        order_status=order.status,
        refunded_amount=refunded,
    )
    await db.commit()

    logger.info(
        "Milestone dispute resolved",
        extra={
            "dispute_id": dispute.id,
            "order_id": order.id,
            "resolution_type": payload.resolution_type,
            "order_status": order.status,
        },
    )
    return result


# =====================================================
# READ
# =====================================================
async def get_dispute(db: AsyncSession, dispute_id: int, user: User) -> DisputeOut:
    dispute, _ = await _load_visible_dispute(db, dispute_id, user)
    return DisputeOut.model_validate(dispute)


async def list_order_disputes(db: AsyncSession, order_id: int, user: User) -> list[DisputeOut]:
    order = await load_order(db, order_id)
    ensure_order_party(order, user)

    result = await db.execute(
        select(MilestoneDispute)
        .where(MilestoneDispute.order_id == order.id)
        .order_by(asc(MilestoneDispute.created_at), asc(MilestoneDispute.id))
    )
    return [DisputeOut.model_validate(d) for d in result.scalars().all()]


async def list_open_disputes(db: AsyncSession) -> list[DisputeOut]:
    result = await db.execute(
        select(MilestoneDispute)
        .where(MilestoneDispute.status == DisputeStatus.OPEN)
        .order_by(asc(MilestoneDispute.created_at), asc(MilestoneDispute.id))
    )
    return [DisputeOut.model_validate(d) for d in result.scalars().all()]


# =====================================================
# MESSAGES
# =====================================================
async def send_dispute_message(
    db: AsyncSession,
    dispute_id: int,
    payload: DisputeMessageCreate,
    user: User,
) -> DisputeMessageOut:
    dispute, _ = await _load_visible_dispute(db, dispute_id, user)
    _ensure_open(dispute)

    message = DisputeMessage(
        dispute_id=dispute.id,
        sender_id=user.id,
        sender_role=user.role,
        body=payload.body,
    )
    db.add(message)
    await db.flush()

    result = DisputeMessageOut.model_validate(message)
    await db.commit()

    logger.info(
        "Dispute message sent",
        extra={"dispute_id": dispute.id, "sender_id": user.id, "message_id": message.id},
    )
    return result


async def list_dispute_messages(
    db: AsyncSession,
    dispute_id: int,
    user: User,
) -> list[DisputeMessageOut]:
    dispute, _ = await _load_visible_dispute(db, dispute_id, user)

    result = await db.execute(
        select(DisputeMessage)
        .where(DisputeMessage.dispute_id == dispute.id)
        .order_by(asc(DisputeMessage.created_at), asc(DisputeMessage.id))
    )
    return [DisputeMessageOut.model_validate(m) for m in result.scalars().all()]
