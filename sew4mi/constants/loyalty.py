from decimal import Decimal

from sew4mi.models.enums.loyalty_tier import LoyaltyTier, RewardType


POINTS_PER_CEDI = 1

REPEAT_TAILOR_WINDOW_DAYS = 30
REPEAT_TAILOR_BONUS = Decimal("0.10")
GROUP_ORDER_BONUS = Decimal("0.05")

# ascending by threshold
TIER_THRESHOLDS = [
    (LoyaltyTier.BRONZE, 0),
    (LoyaltyTier.SILVER, 1000),
    (LoyaltyTier.GOLD, 5000),
    (LoyaltyTier.PLATINUM, 15000),
]

TIER_BONUS_PERCENTAGE = {
    LoyaltyTier.BRONZE: 0,
    LoyaltyTier.SILVER: 5,
    LoyaltyTier.GOLD: 10,
    LoyaltyTier.PLATINUM: 15,
}

# completed order count -> bonus points
ORDER_COUNT_BONUSES = {
    5: 500,
    10: 1000,
}

DEFAULT_REWARDS = [
    {
        "name": "10% Off Next Order",
        "description": "Save 10% on your next tailoring order",
        "points_cost": 500,
        "reward_type": RewardType.DISCOUNT,
        "discount_percentage": Decimal("10"),
    },
    {
        "name": "15% Off Next Order",
        "description": "Save 15% on your next tailoring order",
        "points_cost": 750,
        "reward_type": RewardType.DISCOUNT,
        "discount_percentage": Decimal("15"),
    },
    {
        "name": "20% Off Next Order",
        "description": "Save 20% on your next tailoring order",
        "points_cost": 1000,
        "reward_type": RewardType.DISCOUNT,
        "discount_percentage": Decimal("20"),
    },
    {
        "name": "Free Delivery",
        "description": "Free delivery on your next order",
        "points_cost": 300,
        "reward_type": RewardType.FREE_DELIVERY,
        "discount_percentage": None,
    },
    {
        "name": "Priority Service",
        "description": "Skip the queue with priority tailoring",
        "points_cost": 400,
        "reward_type": RewardType.PRIORITY,
        "discount_percentage": None,
    },
    {
        "name": "Premium Tailor Access",
        "description": "Book top-rated premium tailors",
        "points_cost": 1500,
        "reward_type": RewardType.PRIORITY,
        "discount_percentage": None,
    },
]
