from decimal import Decimal
from types import SimpleNamespace

from sew4mi.models.enums.loyalty_tier import LoyaltyTier, RewardType
from sew4mi.services.loyalty.loyalty_service import (
    calculate_order_points,
    determine_tier,
    get_points_for_next_tier,
    calculate_discount_amount,
)


def test_base_points_one_per_cedi_rounded_down():
    calc = calculate_order_points(Decimal("99.99"))
    assert calc.base_points == 99
    assert calc.total_points == 99


def test_bonuses_stack_before_tier_bonus():
    calc = calculate_order_points(
        Decimal("130.00"),
        LoyaltyTier.SILVER,
        is_repeat_tailor=True,
        is_group_order=True,
    )
    assert calc.base_points == 130
    assert calc.repeat_tailor_bonus == 13
    assert calc.group_order_bonus == 6
    # (130 + 13 + 6) * 5% rounded down
    assert calc.tier_bonus == 7
    assert calc.total_points == 156


def test_bronze_has_no_tier_bonus():
    calc = calculate_order_points(Decimal("500"), LoyaltyTier.BRONZE)
    assert calc.tier_bonus == 0
    assert calc.total_points == 500


def test_tier_thresholds():
    assert determine_tier(0) == LoyaltyTier.BRONZE
    assert determine_tier(999) == LoyaltyTier.BRONZE
    assert determine_tier(1000) == LoyaltyTier.SILVER
    assert determine_tier(5000) == LoyaltyTier.GOLD
    assert determine_tier(20000) == LoyaltyTier.PLATINUM


def test_points_for_next_tier():
    assert get_points_for_next_tier(0) == (LoyaltyTier.SILVER, 1000)
    assert get_points_for_next_tier(1200) == (LoyaltyTier.GOLD, 3800)
    assert get_points_for_next_tier(15000) == (None, 0)


def test_discount_amount():
    discount = SimpleNamespace(reward_type=RewardType.DISCOUNT, discount_percentage=Decimal("15"))
    assert calculate_discount_amount(discount, Decimal("200.00")) == Decimal("30.00")

    delivery = SimpleNamespace(reward_type=RewardType.FREE_DELIVERY, discount_percentage=None)
    assert calculate_discount_amount(delivery, Decimal("200.00")) == Decimal("0.00")
