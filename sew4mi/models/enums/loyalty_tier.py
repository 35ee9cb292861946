# sew4mi/models/enums/loyalty_tier.py
import enum


class LoyaltyTier(str, enum.Enum):
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"


class LoyaltyTransactionType(str, enum.Enum):
    EARN = "EARN"
    REDEEM = "REDEEM"
    EXPIRE = "EXPIRE"
    BONUS = "BONUS"


class RewardType(str, enum.Enum):
    DISCOUNT = "DISCOUNT"
    PRIORITY = "PRIORITY"
    FREE_DELIVERY = "FREE_DELIVERY"
