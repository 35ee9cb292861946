# sew4mi/models/enums/review_status.py
import enum


class ModerationStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    FLAGGED = "FLAGGED"


class VoteType(str, enum.Enum):
    HELPFUL = "HELPFUL"
    UNHELPFUL = "UNHELPFUL"


class ReviewIneligibilityReason(str, enum.Enum):
    NOT_DELIVERED = "NOT_DELIVERED"
    DISPUTED = "DISPUTED"
    CANCELLED = "CANCELLED"
    ALREADY_REVIEWED = "ALREADY_REVIEWED"
    TIME_EXPIRED = "TIME_EXPIRED"
    NOT_FOUND = "NOT_FOUND"
