from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.core.db import get_db
from sew4mi.utils.check_roles import require_role
from sew4mi.utils.get_user import get_current_user
from sew4mi.utils.response import success_response, APIResponse

from sew4mi.services.orders.dispute_service import (
    open_milestone_dispute,
    resolve_dispute,
    get_dispute,
    list_order_disputes,
    list_open_disputes,
    send_dispute_message,
    list_dispute_messages,
)

from sew4mi.schemas.orders.dispute_schemas import (
    DisputeCreate,
    DisputeResolve,
    DisputeMessageCreate,
    DisputeOut,
    DisputeResolutionResult,
    DisputeMessageOut,
)

router = APIRouter(
    prefix="/disputes",
    tags=["Disputes"],
)


# =====================================================
# OPEN / READ
# =====================================================
@router.post("/", response_model=APIResponse[DisputeOut], status_code=201)
async def open_dispute_api(
    payload: DisputeCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer", "tailor"])),
):
    dispute = await open_milestone_dispute(db, payload, user)
    return success_response("Dispute opened; the order is on hold until it is resolved", dispute)


@router.get("/open", response_model=APIResponse[list[DisputeOut]])
async def list_open_disputes_api(
    db: AsyncSession = Depends(get_db),
    _=Depends(require_role(["admin"])),
):
    disputes = await list_open_disputes(db)
    return success_response("Open disputes retrieved successfully", disputes)


@router.get("/orders/{order_id}", response_model=APIResponse[list[DisputeOut]])
async def list_order_disputes_api(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    disputes = await list_order_disputes(db, order_id, user)
    return success_response("Order disputes retrieved successfully", disputes)


@router.get("/{dispute_id}", response_model=APIResponse[DisputeOut])
async def get_dispute_api(
    dispute_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    dispute = await get_dispute(db, dispute_id, user)
    return success_response("Dispute retrieved successfully", dispute)


# =====================================================
# RESOLVE
# =====================================================
@router.post("/{dispute_id}/resolve", response_model=APIResponse[DisputeResolutionResult])
async def resolve_dispute_api(
    dispute_id: int,
    payload: DisputeResolve,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["admin"])),
):
    result = await resolve_dispute(db, dispute_id, payload, user)
    return success_response("Dispute resolved successfully", result)


# =====================================================
# MESSAGES
# =====================================================
@router.get("/{dispute_id}/messages", response_model=APIResponse[list[DisputeMessageOut]])
async def list_dispute_messages_api(
    dispute_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    messages = await list_dispute_messages(db, dispute_id, user)
    return success_response("Dispute messages retrieved successfully", messages)


@router.post("/{dispute_id}/messages", response_model=APIResponse[DisputeMessageOut], status_code=201)
async def send_dispute_message_api(
    dispute_id: int,
    payload: DisputeMessageCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    message = await send_dispute_message(db, dispute_id, payload, user)
    return success_response("Message sent", message)
