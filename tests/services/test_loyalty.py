import pytest

from sew4mi.core.exceptions import AppException
from sew4mi.constants.error_codes import ErrorCode
from sew4mi.services.loyalty.loyalty_service import (
    seed_default_rewards,
    list_rewards,
    get_affordable_rewards,
    redeem_reward,
    get_or_create_account,
    get_transaction_history,
)


async def _reward_id(db, name):
    return next(r.id for r in await list_rewards(db) if r.name == name)


async def test_seed_rewards_is_idempotent(db):
    assert await seed_default_rewards(db) == 6
    assert await seed_default_rewards(db) == 0

    costs = [r.points_cost for r in await list_rewards(db)]
    assert costs == sorted(costs)


async def test_redeem_needs_enough_points(db, customer):
    await seed_default_rewards(db)
    reward_id = await _reward_id(db, "10% Off Next Order")

    with pytest.raises(AppException) as exc:
        await redeem_reward(db, reward_id, customer)
    assert exc.value.error_code == ErrorCode.LOYALTY_INSUFFICIENT_POINTS
    assert exc.value.details == {"available": 0, "required": 500}


async def test_redeem_spends_available_but_keeps_lifetime(db, customer):
    await seed_default_rewards(db)
    account = await get_or_create_account(db, customer.id)
    account.total_points = account.available_points = account.lifetime_points = 600
    await db.commit()

    affordable = {r.name for r in await get_affordable_rewards(db, customer)}
    assert affordable == {"Free Delivery", "Priority Service", "10% Off Next Order"}

    result = await redeem_reward(db, await _reward_id(db, "10% Off Next Order"), customer)
    assert result.points_spent == 500
    assert result.available_points == 100

    assert account.lifetime_points == 600
    assert await get_affordable_rewards(db, customer) == []

    history = await get_transaction_history(db, customer)
    assert history.total == 1
    assert history.items[0].points == -500


async def test_unknown_reward(db, customer):
    with pytest.raises(AppException) as exc:
        await redeem_reward(db, 404, customer)
    assert exc.value.status_code == 404
