# sew4mi/services/loyalty/loyalty_service.py

from datetime import timedelta
from decimal import Decimal
import logging
import math

from sqlalchemy import select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.models.loyalty.loyalty_models import LoyaltyAccount, LoyaltyTransaction, LoyaltyReward
from sew4mi.models.orders.order_models import Order
from sew4mi.models.users.user_models import User
from sew4mi.models.enums.loyalty_tier import LoyaltyTier, LoyaltyTransactionType, RewardType
from sew4mi.models.enums.order_status import OrderStatus

from sew4mi.schemas.loyalty.loyalty_schemas import (
    LoyaltyAccountOut,
    LoyaltyTransactionOut,
    LoyaltyTransactionListData,
    LoyaltyRewardOut,
    RedeemRewardResult,
    PointsCalculation,
)

from sew4mi.constants.loyalty import (
    POINTS_PER_CEDI,
    REPEAT_TAILOR_WINDOW_DAYS,
    REPEAT_TAILOR_BONUS,
    GROUP_ORDER_BONUS,
    TIER_THRESHOLDS,
    TIER_BONUS_PERCENTAGE,
    ORDER_COUNT_BONUSES,
    DEFAULT_REWARDS,
)
from sew4mi.core.exceptions import AppException
from sew4mi.constants.error_codes import ErrorCode
from sew4mi.constants.activity_codes import ActivityCode
from sew4mi.utils.activity_helpers import emit_activity, actor_context
from sew4mi.utils.decimal_utils import to_decimal
from sew4mi.utils.datetime_utils import ensure_utc, utcnow

logger = logging.getLogger(__name__)


# =====================================================
# POINT RULES
# =====================================================
def calculate_order_points(
    order_amount,
    tier: LoyaltyTier = LoyaltyTier.BRONZE,
    *,
    is_repeat_tailor: bool = False,
    is_group_order: bool = False,
) -> PointsCalculation:
    base = math.floor(Decimal(str(order_amount)) * POINTS_PER_CEDI)

    repeat_bonus = math.floor(base * REPEAT_TAILOR_BONUS) if is_repeat_tailor else 0
    group_bonus = math.floor(base * GROUP_ORDER_BONUS) if is_group_order else 0

    subtotal = base + repeat_bonus + group_bonus
    tier_bonus = subtotal * TIER_BONUS_PERCENTAGE[tier] // 100

    return PointsCalculation(
        base_points=base,
        repeat_tailor_bonus=repeat_bonus,
        group_order_bonus=group_bonus,
        tier_bonus=tier_bonus,
        total_points=subtotal + tier_bonus,
    )


def determine_tier(lifetime_points: int) -> LoyaltyTier:
    tier = LoyaltyTier.BRONZE
    for candidate, threshold in TIER_THRESHOLDS:
        if lifetime_points >= threshold:
            tier = candidate
    return tier


def get_points_for_next_tier(lifetime_points: int) -> tuple[LoyaltyTier | None, int]:
    for candidate, threshold in TIER_THRESHOLDS:
        if lifetime_points < threshold:
            return candidate, threshold - lifetime_points
    return None, 0


def calculate_discount_amount(reward: LoyaltyReward, order_amount) -> Decimal:
    if reward.reward_type != RewardType.DISCOUNT or not reward.discount_percentage:
        return Decimal("0.00")
    return to_decimal(to_decimal(order_amount) * Decimal(str(reward.discount_percentage)) / Decimal("100"))


# =====================================================
# ACCOUNT
# =====================================================
async def get_or_create_account(db: AsyncSession, user_id: int) -> LoyaltyAccount:
    account = await db.scalar(
        select(LoyaltyAccount).where(LoyaltyAccount.user_id == user_id)
    )
    if account:
        return account

    account = LoyaltyAccount(
        user_id=user_id,
        total_points=0,
        available_points=0,
        lifetime_points=0,
        tier=LoyaltyTier.BRONZE,
        completed_orders=0,
    )
    db.add(account)
    await db.flush()
    return account


def _map_account(account: LoyaltyAccount) -> LoyaltyAccountOut:
    next_tier, needed = get_points_for_next_tier(account.lifetime_points)
    out = LoyaltyAccountOut.model_validate(account)
    out.next_tier = next_tier
    out.points_to_next_tier = needed
    return out


def _credit(account: LoyaltyAccount, points: int) -> None:
    account.total_points += points
    account.available_points += points
    account.lifetime_points += points


async def _is_repeat_tailor(db: AsyncSession, order: Order) -> bool:
    delivered_at = ensure_utc(order.actual_delivery) or utcnow()
    window_start = delivered_at - timedelta(days=REPEAT_TAILOR_WINDOW_DAYS)

    previous = await db.scalar(
        select(func.count(Order.id)).where(
            Order.customer_id == order.customer_id,
            Order.tailor_id == order.tailor_id,
            Order.id != order.id,
            Order.status == OrderStatus.DELIVERED,
            Order.actual_delivery >= window_start,
        )
    )
    return bool(previous)


async def award_points_for_order(
    db: AsyncSession,
    order: Order,
    *,
    is_group_order: bool = False,
) -> int:
    """Credit the customer for a delivered order. Does not commit."""
    account = await get_or_create_account(db, order.customer_id)

    already = await db.scalar(
        select(LoyaltyTransaction.id).where(
            LoyaltyTransaction.account_id == account.id,
            LoyaltyTransaction.order_id == order.id,
            LoyaltyTransaction.transaction_type == LoyaltyTransactionType.EARN,
        )
    )
    if already:
        logger.info("Points already awarded", extra={"order_id": order.id})
        return 0

    calc = calculate_order_points(
        order.total_amount,
        account.tier,
        is_repeat_tailor=await _is_repeat_tailor(db, order),
        is_group_order=is_group_order,
    )
    awarded = 0

    if calc.total_points > 0:
        db.add(
            LoyaltyTransaction(
                account_id=account.id,
                order_id=order.id,
                transaction_type=LoyaltyTransactionType.EARN,
                points=calc.total_points,
                description=f"Earned for order {order.order_number}",
            )
        )
        _credit(account, calc.total_points)
        awarded += calc.total_points

    account.completed_orders += 1
    milestone_bonus = ORDER_COUNT_BONUSES.get(account.completed_orders)
    if milestone_bonus:
        db.add(
            LoyaltyTransaction(
                account_id=account.id,
                order_id=order.id,
                transaction_type=LoyaltyTransactionType.BONUS,
                points=milestone_bonus,
                description=f"Bonus for completing {account.completed_orders} orders",
            )
        )
        _credit(account, milestone_bonus)
        awarded += milestone_bonus

    new_tier = determine_tier(account.lifetime_points)
    if new_tier != account.tier:
        logger.info(
            "Loyalty tier changed",
            extra={"user_id": account.user_id, "from_tier": account.tier, "to_tier": new_tier},
        )
        account.tier = new_tier

    logger.info(
        "Loyalty points awarded",
        extra={"order_id": order.id, "user_id": account.user_id, "points": awarded},
    )
    return awarded


async def get_account(db: AsyncSession, user: User) -> LoyaltyAccountOut:
    account = await get_or_create_account(db, user.id)
    await db.commit()
    return _map_account(account)


async def get_transaction_history(
    db: AsyncSession,
    user: User,
    *,
    page: int = 1,
    page_size: int = 20,
) -> LoyaltyTransactionListData:
    account = await db.scalar(
        select(LoyaltyAccount).where(LoyaltyAccount.user_id == user.id)
    )
    if not account:
        return LoyaltyTransactionListData(total=0, items=[])

    base_query = select(LoyaltyTransaction).where(LoyaltyTransaction.account_id == account.id)

    total = await db.scalar(
        select(func.count()).select_from(base_query.subquery())
    )

    result = await db.execute(
        base_query
        .order_by(desc(LoyaltyTransaction.created_at), desc(LoyaltyTransaction.id))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return LoyaltyTransactionListData(
        total=total or 0,
        items=[LoyaltyTransactionOut.model_validate(t) for t in result.scalars().all()],
    )


# =====================================================
# REWARDS
# =====================================================
async def list_rewards(db: AsyncSession, *, active_only: bool = True) -> list[LoyaltyRewardOut]:
    stmt = select(LoyaltyReward).order_by(LoyaltyReward.points_cost)
    if active_only:
        stmt = stmt.where(LoyaltyReward.is_active.is_(True))

    result = await db.execute(stmt)
    return [LoyaltyRewardOut.model_validate(r) for r in result.scalars().all()]


async def get_affordable_rewards(db: AsyncSession, user: User) -> list[LoyaltyRewardOut]:
    account = await db.scalar(
        select(LoyaltyAccount).where(LoyaltyAccount.user_id == user.id)
    )
    available = account.available_points if account else 0

    return [r for r in await list_rewards(db) if r.points_cost <= available]


async def redeem_reward(
    db: AsyncSession,
    reward_id: int,
    user: User,
) -> RedeemRewardResult:
    reward = await db.get(LoyaltyReward, reward_id)
    if not reward:
        raise AppException(404, "Reward not found", ErrorCode.LOYALTY_REWARD_NOT_FOUND)

    if not reward.is_active:
        raise AppException(409, "Reward is no longer available", ErrorCode.LOYALTY_REWARD_INACTIVE)

    account = await get_or_create_account(db, user.id)
    if account.available_points < reward.points_cost:
        raise AppException(
            400,
            "Not enough points for this reward",
            ErrorCode.LOYALTY_INSUFFICIENT_POINTS,
            {"available": account.available_points, "required": reward.points_cost},
        )

    db.add(
        LoyaltyTransaction(
            account_id=account.id,
            reward_id=reward.id,
            transaction_type=LoyaltyTransactionType.REDEEM,
            points=-reward.points_cost,
            description=f"Redeemed {reward.name}",
        )
    )

    # lifetime points drive the tier and never go down
    account.available_points -= reward.points_cost
    account.total_points -= reward.points_cost

    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=ActivityCode.REDEEM_REWARD,
        target_name=reward.name,
        points=reward.points_cost,
        **actor_context(user),
    )

    await db.commit()

    logger.info(
        "Reward redeemed",
        extra={"user_id": user.id, "reward_id": reward.id, "points": reward.points_cost},
    )

    return RedeemRewardResult(
        reward=LoyaltyRewardOut.model_validate(reward),
        points_spent=reward.points_cost,
        available_points=account.available_points,
    )


async def seed_default_rewards(db: AsyncSession) -> int:
    existing = set(
        (await db.execute(select(LoyaltyReward.name))).scalars().all()
    )

    created = 0
    for entry in DEFAULT_REWARDS:
        if entry["name"] in existing:
            continue
        db.add(LoyaltyReward(is_active=True, **entry))
        created += 1

    await db.commit()
    return created
