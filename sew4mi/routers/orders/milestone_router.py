from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.core.db import get_db
from sew4mi.constants.milestones import MILESTONE_ORDER
from sew4mi.utils.check_roles import require_role
from sew4mi.utils.get_user import get_current_user
from sew4mi.utils.response import success_response, APIResponse

from sew4mi.services.orders.milestone_service import (
    review_milestone,
    get_milestone_approval_history,
    auto_approve_expired_milestones,
)
from sew4mi.services.orders.order_progress import get_milestone_display_info

from sew4mi.schemas.orders.order_schemas import MilestoneDisplayOut
from sew4mi.schemas.orders.milestone_schemas import (
    MilestoneReview,
    MilestoneReviewResult,
    MilestoneApprovalOut,
    AutoApprovalResult,
)

router = APIRouter(
    prefix="/milestones",
    tags=["Milestones"],
)


@router.get("/stages", response_model=APIResponse[list[MilestoneDisplayOut]])
async def list_milestone_stages_api(
    _=Depends(get_current_user),
):
    stages = [MilestoneDisplayOut(**get_milestone_display_info(s)) for s in MILESTONE_ORDER]
    return success_response("Milestone stages retrieved successfully", stages)


@router.post("/{milestone_id}/review", response_model=APIResponse[MilestoneReviewResult])
async def review_milestone_api(
    milestone_id: int,
    payload: MilestoneReview,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer"])),
):
    result = await review_milestone(db, milestone_id, payload, user)
    message = "Milestone approved" if payload.action == "APPROVED" else "Milestone rejected"
    return success_response(message, result)


@router.get("/{milestone_id}/approvals", response_model=APIResponse[list[MilestoneApprovalOut]])
async def milestone_approval_history_api(
    milestone_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    history = await get_milestone_approval_history(db, milestone_id, user)
    return success_response("Approval history retrieved successfully", history)


@router.post("/auto-approve", response_model=APIResponse[AutoApprovalResult])
async def run_auto_approval_api(
    db: AsyncSession = Depends(get_db),
    _=Depends(require_role(["admin"])),
):
    result = await auto_approve_expired_milestones(db)
    return success_response("Auto-approval run completed", result)
