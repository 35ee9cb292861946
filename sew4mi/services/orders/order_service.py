# sew4mi/services/orders/order_service.py

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
import logging
import math

from sqlalchemy import select, func, asc, desc
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.models.orders.order_models import Order
from sew4mi.models.users.user_models import User
from sew4mi.models.profiles.family_profile_models import FamilyProfile
from sew4mi.models.enums.order_status import OrderStatus, FabricChoice, UrgencyLevel
from sew4mi.models.enums.escrow_stage import EscrowStage
from sew4mi.models.enums.user_role import UserRole

from sew4mi.schemas.orders.order_schemas import (
    OrderCreate,
    OrderCancel,
    OrderOut,
    OrderListItem,
    OrderListData,
    OrderPricingRequest,
    OrderPricingOut,
    OrderProgressDetailOut,
    MilestoneDisplayOut,
    GarmentTypeOut,
)

from sew4mi.constants.garments import (
    GARMENT_TYPES,
    FABRIC_COST_PER_YARD,
    FABRIC_MIN_RATIO,
    DEFAULT_EXPRESS_SURCHARGE_RATIO,
)
from sew4mi.core.exceptions import AppException
from sew4mi.constants.error_codes import ErrorCode
from sew4mi.constants.activity_codes import ActivityCode
from sew4mi.utils.activity_helpers import emit_activity, actor_context
from sew4mi.utils.decimal_utils import to_decimal, percent_of
from sew4mi.utils.datetime_utils import utcnow

from sew4mi.services.orders.order_lookup import load_order, ensure_order_party, CLOSED_STATUSES
from sew4mi.services.orders.order_progress import (
    generate_order_progress,
    get_overdue_milestones,
    get_milestone_display_info,
)
from sew4mi.services.payments.escrow_calculator import (
    calculate_escrow_breakdown,
    EscrowCalculationError,
)
from sew4mi.services.payments.escrow_service import refund_deposit
from sew4mi.services.orders.milestone_service import reject_pending_milestones
from sew4mi.services.loyalty.loyalty_service import award_points_for_order

logger = logging.getLogger(__name__)

CANCELLABLE_STATUSES = {OrderStatus.PENDING_DEPOSIT, OrderStatus.DEPOSIT_PAID}


# =====================================================
# CATALOGUE + PRICING
# =====================================================
def list_garment_types() -> list[GarmentTypeOut]:
    return [
        GarmentTypeOut(id=garment_id, **entry)
        for garment_id, entry in GARMENT_TYPES.items()
    ]


def _garment(garment_type: str) -> dict:
    garment = GARMENT_TYPES.get(garment_type)
    if not garment:
        raise AppException(
            400,
            f"Unknown garment type '{garment_type}'",
            ErrorCode.GARMENT_TYPE_INVALID,
        )
    return garment


def estimate_delivery_days(garment_type: str, urgency_level: UrgencyLevel) -> int:
    days = _garment(garment_type)["estimated_days"]
    if urgency_level == UrgencyLevel.EXPRESS:
        return math.ceil(days / 2)
    return days


def calculate_order_pricing(
    garment_type: str,
    fabric_choice: FabricChoice,
    urgency_level: UrgencyLevel,
    rush_fee_percentage: Decimal | None = None,
) -> OrderPricingOut:
    garment = _garment(garment_type)
    base_price = to_decimal(garment["base_price"])

    fabric_cost = Decimal("0.00")
    if fabric_choice == FabricChoice.TAILOR_SOURCED:
        fabric_cost = max(
            percent_of(base_price, FABRIC_MIN_RATIO),
            to_decimal(garment["fabric_yards"] * FABRIC_COST_PER_YARD),
        )

    urgency_surcharge = Decimal("0.00")
    if urgency_level == UrgencyLevel.EXPRESS:
        ratio = (
            Decimal(str(rush_fee_percentage)) / Decimal("100")
            if rush_fee_percentage is not None
            else DEFAULT_EXPRESS_SURCHARGE_RATIO
        )
        urgency_surcharge = percent_of(base_price, ratio)

    total = base_price + fabric_cost + urgency_surcharge

    try:
        breakdown = calculate_escrow_breakdown(total)
    except EscrowCalculationError as e:
        raise AppException(400, str(e), ErrorCode.ESCROW_CALCULATION_ERROR)

    return OrderPricingOut(
        garment_type=garment_type,
        base_price=base_price,
        fabric_cost=fabric_cost,
        urgency_surcharge=urgency_surcharge,
        total_amount=breakdown.total_amount,
        deposit_amount=breakdown.deposit_amount,
        fitting_amount=breakdown.fitting_amount,
        final_amount=breakdown.final_amount,
        estimated_days=estimate_delivery_days(garment_type, urgency_level),
    )


async def _get_active_tailor(db: AsyncSession, tailor_id: int) -> User:
    tailor = await db.get(User, tailor_id)
    if not tailor or not tailor.is_active or tailor.role != UserRole.tailor.value:
        raise AppException(404, "Tailor not found", ErrorCode.TAILOR_NOT_FOUND)
    return tailor


async def quote_order(db: AsyncSession, payload: OrderPricingRequest) -> OrderPricingOut:
    rush_fee = None
    if payload.tailor_id is not None:
        tailor = await _get_active_tailor(db, payload.tailor_id)
        rush_fee = tailor.rush_order_fee_percentage

    return calculate_order_pricing(
        payload.garment_type,
        payload.fabric_choice,
        payload.urgency_level,
        rush_fee,
    )


def _map_order(order: Order) -> OrderOut:
    return OrderOut.model_validate(order)


# =====================================================
# CREATE ORDER
# =====================================================
async def create_order(
    db: AsyncSession,
    payload: OrderCreate,
    user: User,
) -> OrderOut:
    tailor = await _get_active_tailor(db, payload.tailor_id)
    if tailor.id == user.id:
        raise AppException(400, "You cannot order from yourself", ErrorCode.VALIDATION_ERROR)

    if payload.family_profile_id is not None:
        profile = await db.get(FamilyProfile, payload.family_profile_id)
        if not profile or profile.is_deleted or profile.user_id != user.id:
            raise AppException(404, "Family profile not found", ErrorCode.FAMILY_PROFILE_NOT_FOUND)

    pricing = calculate_order_pricing(
        payload.garment_type,
        payload.fabric_choice,
        payload.urgency_level,
        tailor.rush_order_fee_percentage,
    )

    order = Order(
        order_number="TEMP",
        customer_id=user.id,
        tailor_id=tailor.id,
        family_profile_id=payload.family_profile_id,
        garment_type=payload.garment_type,
        fabric_choice=payload.fabric_choice,
        urgency_level=payload.urgency_level,
        special_instructions=payload.special_instructions,
        status=OrderStatus.PENDING_DEPOSIT,
        version=1,
        base_price=pricing.base_price,
        fabric_cost=pricing.fabric_cost,
        urgency_surcharge=pricing.urgency_surcharge,
        total_amount=pricing.total_amount,
        deposit_amount=pricing.deposit_amount,
        fitting_amount=pricing.fitting_amount,
        final_amount=pricing.final_amount,
        escrow_stage=EscrowStage.DEPOSIT,
        escrow_balance=pricing.total_amount,
        deposit_paid=Decimal("0.00"),
        fitting_paid=Decimal("0.00"),
        final_paid=Decimal("0.00"),
        refunded_amount=Decimal("0.00"),
        estimated_delivery=date.today() + timedelta(days=pricing.estimated_days),
        created_by_id=user.id,
        updated_by_id=user.id,
    )

    db.add(order)
    await db.flush()

    order.order_number = f"ORD-{order.id:06d}"

    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=ActivityCode.CREATE_ORDER,
        target_name=order.order_number,
        amount=order.total_amount,
        **actor_context(user),
    )

    result = _map_order(order)
    await db.commit()

    logger.info(
        "Order created",
        extra={
            "order_id": order.id,
            "customer_id": user.id,
            "tailor_id": tailor.id,
            "total_amount": str(order.total_amount),
        },
    )
    return result


# =====================================================
# GET / LIST
# =====================================================
async def get_order(db: AsyncSession, order_id: int, user: User) -> OrderOut:
    order = await load_order(db, order_id)
    ensure_order_party(order, user)
    return _map_order(order)


async def list_orders(
    db: AsyncSession,
    user: User,
    *,
    status: OrderStatus | None = None,
    page: int = 1,
    page_size: int = 20,
    sort_by: str = "created_at",
    order: str = "desc",
) -> OrderListData:
    base_query = select(Order).where(Order.is_deleted.is_(False))

    if user.role == UserRole.customer.value:
        base_query = base_query.where(Order.customer_id == user.id)
    elif user.role == UserRole.tailor.value:
        base_query = base_query.where(Order.tailor_id == user.id)

    if status:
        base_query = base_query.where(Order.status == status)

    total = await db.scalar(
        select(func.count()).select_from(base_query.subquery())
    )

    sort_map = {
        "created_at": Order.created_at,
        "total_amount": Order.total_amount,
        "estimated_delivery": Order.estimated_delivery,
    }
    sort_col = sort_map.get(sort_by, Order.created_at)

    result = await db.execute(
        base_query
        .order_by(asc(sort_col) if order == "asc" else desc(sort_col))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return OrderListData(
        total=total or 0,
        items=[OrderListItem.model_validate(o) for o in result.scalars().all()],
    )


# =====================================================
# PROGRESS
# =====================================================
async def get_order_progress(
    db: AsyncSession,
    order_id: int,
    user: User,
    now=None,
) -> OrderProgressDetailOut:
    order = await load_order(db, order_id, with_milestones=True)
    ensure_order_party(order, user)

    original_estimate = None
    if order.estimated_delivery:
        original_estimate = datetime.combine(
            order.estimated_delivery, time(23, 59, 59), tzinfo=timezone.utc
        )

    progress = generate_order_progress(order.id, order.milestones, original_estimate, now=now)

    overdue = []
    if order.status not in CLOSED_STATUSES and order.status != OrderStatus.PENDING_DEPOSIT:
        overdue = get_overdue_milestones(order.milestones, order.created_at, now=now)

    next_info = None
    if progress.next_milestone is not None:
        next_info = MilestoneDisplayOut(**get_milestone_display_info(progress.next_milestone))

    return OrderProgressDetailOut(
        progress=progress,
        overdue_milestones=overdue,
        next_milestone_info=next_info,
    )


# =====================================================
# CANCEL
# =====================================================
async def cancel_order(
    db: AsyncSession,
    order_id: int,
    payload: OrderCancel,
    user: User,
) -> OrderOut:
    order = await load_order(db, order_id)
    if user.role != UserRole.admin.value and order.customer_id != user.id:
        raise AppException(403, "Only the customer can cancel this order", ErrorCode.ORDER_ACCESS_DENIED)

    if order.status not in CANCELLABLE_STATUSES:
        raise AppException(
            409,
            f"Order cannot be cancelled once it is {order.status.value}",
            ErrorCode.ORDER_INVALID_STATE,
        )

    await refund_deposit(db, order, actor=user, reason=payload.reason)
    await reject_pending_milestones(db, order, "Order cancelled", actor=user)

    order.status = OrderStatus.CANCELLED
    order.version += 1
    order.updated_by_id = user.id

    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=ActivityCode.CANCEL_ORDER,
        target_name=order.order_number,
        **actor_context(user),
    )

    result = _map_order(order)
    await db.commit()

    logger.info("Order cancelled", extra={"order_id": order.id, "reason": payload.reason})
    return result


# =====================================================
# CONFIRM DELIVERY
# =====================================================
async def confirm_delivery(
    db: AsyncSession,
    order_id: int,
    user: User,
) -> OrderOut:
    order = await load_order(db, order_id)
    if order.customer_id != user.id:
        raise AppException(403, "Only the customer can confirm delivery", ErrorCode.ORDER_ACCESS_DENIED)

    if order.status != OrderStatus.READY_FOR_DELIVERY:
        raise AppException(
            409,
            "Order is not ready for delivery",
            ErrorCode.ORDER_INVALID_STATE,
        )

    order.status = OrderStatus.DELIVERED
    order.actual_delivery = utcnow()
    order.version += 1
    order.updated_by_id = user.id

    await award_points_for_order(db, order)

    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=ActivityCode.CONFIRM_DELIVERY,
        target_name=order.order_number,
        **actor_context(user),
    )

    result = _map_order(order)
    await db.commit()

    logger.info("Order delivered", extra={"order_id": order.id})
    return result
