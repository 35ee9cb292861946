from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.core.db import get_db
from sew4mi.utils.check_roles import require_role
from sew4mi.utils.get_user import get_current_user
from sew4mi.utils.response import success_response, APIResponse

from sew4mi.services.loyalty.loyalty_service import (
    get_account,
    get_transaction_history,
    list_rewards,
    get_affordable_rewards,
    redeem_reward,
)

from sew4mi.schemas.loyalty.loyalty_schemas import (
    LoyaltyAccountOut,
    LoyaltyTransactionListData,
    LoyaltyRewardOut,
    RedeemRewardResult,
)

router = APIRouter(
    prefix="/loyalty",
    tags=["Loyalty"],
)


@router.get("/account", response_model=APIResponse[LoyaltyAccountOut])
async def get_loyalty_account_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer"])),
):
    account = await get_account(db, user)
    return success_response("Loyalty account retrieved successfully", account)


@router.get("/transactions", response_model=APIResponse[LoyaltyTransactionListData])
async def loyalty_transactions_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer"])),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    data = await get_transaction_history(db, user, page=page, page_size=page_size)
    return success_response("Loyalty transactions retrieved successfully", data)


@router.get("/rewards", response_model=APIResponse[list[LoyaltyRewardOut]])
async def list_rewards_api(
    db: AsyncSession = Depends(get_db),
    _=Depends(get_current_user),
):
    rewards = await list_rewards(db)
    return success_response("Rewards retrieved successfully", rewards)


@router.get("/rewards/affordable", response_model=APIResponse[list[LoyaltyRewardOut]])
async def affordable_rewards_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer"])),
):
    rewards = await get_affordable_rewards(db, user)
    return success_response("Affordable rewards retrieved successfully", rewards)


@router.post("/rewards/{reward_id}/redeem", response_model=APIResponse[RedeemRewardResult])
async def redeem_reward_api(
    reward_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["customer"])),
):
    result = await redeem_reward(db, reward_id, user)
    return success_response("Reward redeemed", result)
