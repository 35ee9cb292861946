from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.core.db import get_db
from sew4mi.models.enums.order_status import OrderStatus
from sew4mi.utils.check_roles import require_role
from sew4mi.utils.get_user import get_current_user
from sew4mi.utils.response import success_response, APIResponse

from sew4mi.services.orders.order_service import (
    list_garment_types,
    quote_order,
    create_order,
    get_order,
    list_orders,
    get_order_progress,
    cancel_order,
    confirm_delivery,
)
from sew4mi.services.orders.milestone_service import (
    submit_milestone,
    list_order_milestones,
)
from sew4mi.services.orders.message_service import (
    send_order_message,
    list_order_messages,
)

from sew4mi.schemas.orders.order_schemas import (
    OrderCreate,
    OrderCancel,
    OrderOut,
    OrderListData,
    OrderPricingRequest,
    OrderPricingOut,
    OrderProgressDetailOut,
    GarmentTypeOut,
)
from sew4mi.schemas.orders.milestone_schemas import MilestoneSubmit, MilestoneOut
from sew4mi.schemas.orders.message_schemas import MessageCreate, MessageOut, MessageListData

router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
)


# =====================================================
# CATALOGUE + PRICING
# =====================================================
@router.get("/garment-types", response_model=APIResponse[list[GarmentTypeOut]])
async def list_garment_types_api(
    _=Depends(get_current_user),
):
    return success_response("Garment types retrieved successfully", list_garment_types())


@router.post("/pricing", response_model=APIResponse[OrderPricingOut])
async def order_pricing_api(
    payload: OrderPricingRequest,
    db: AsyncSession = Depends(get_db),
    _=Depends(get_current_user),
):
    pricing = await quote_order(db, payload)
    return success_response("Order pricing calculated", pricing)


# =====================================================
# CREATE / LIST / GET
# =====================================================
@router.post("/", response_model=APIResponse[OrderOut], status_code=201)
async def create_order_api(
    payload: OrderCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer"])),
):
    order = await create_order(db, payload, user)
    return success_response("Order created successfully", order)


@router.get("/", response_model=APIResponse[OrderListData])
async def list_orders_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),

    status: OrderStatus | None = Query(None),

    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),

    sort_by: str = Query("created_at"),
    order: str = Query("desc"),
):
    data = await list_orders(
        db,
        user,
        status=status,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        order=order,
    )
    return success_response("Orders retrieved successfully", data)


@router.get("/{order_id}", response_model=APIResponse[OrderOut])
async def get_order_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    order = await get_order(db, order_id, user)
    return success_response("Order retrieved successfully", order)


@router.get("/{order_id}/progress", response_model=APIResponse[OrderProgressDetailOut])
async def get_order_progress_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    progress = await get_order_progress(db, order_id, user)
    return success_response("Order progress retrieved successfully", progress)


# =====================================================
# LIFECYCLE
# =====================================================
@router.post("/{order_id}/cancel", response_model=APIResponse[OrderOut])
async def cancel_order_api(
    order_id: int,
    payload: OrderCancel,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "admin"])),
):
    order = await cancel_order(db, order_id, payload, user)
    return success_response("Order cancelled successfully", order)


@router.post("/{order_id}/confirm-delivery", response_model=APIResponse[OrderOut])
async def confirm_delivery_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer"])),
):
    order = await confirm_delivery(db, order_id, user)
    return success_response("Delivery confirmed", order)


# =====================================================
# MILESTONES
# =====================================================
@router.get("/{order_id}/milestones", response_model=APIResponse[list[MilestoneOut]])
async def list_order_milestones_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    milestones = await list_order_milestones(db, order_id, user)
    return success_response("Milestones retrieved successfully", milestones)


@router.post("/{order_id}/milestones", response_model=APIResponse[MilestoneOut], status_code=201)
async def submit_milestone_api(
    order_id: int,
    payload: MilestoneSubmit,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["tailor"])),
):
    milestone = await submit_milestone(db, order_id, payload, user)
    return success_response("Milestone submitted for customer review", milestone)


# =====================================================
# MESSAGES
# =====================================================
@router.get("/{order_id}/messages", response_model=APIResponse[MessageListData])
async def list_order_messages_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
):
    data = await list_order_messages(db, order_id, user, page=page, page_size=page_size)
    return success_response("Messages retrieved successfully", data)


@router.post("/{order_id}/messages", response_model=APIResponse[MessageOut], status_code=201)
async def send_order_message_api(
    order_id: int,
    payload: MessageCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    message = await send_order_message(db, order_id, payload, user)
    return success_response("Message sent", message)
