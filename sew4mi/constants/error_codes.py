from enum import Enum


class ErrorCode(str, Enum):
    # ---------------- GENERIC ----------------
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # ---------------- USERS ----------------
    USER_NOT_FOUND = "USER_NOT_FOUND"
    TAILOR_NOT_FOUND = "TAILOR_NOT_FOUND"

    # ---------------- ORDERS ----------------
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    ORDER_INVALID_STATE = "ORDER_INVALID_STATE"
    ORDER_ACCESS_DENIED = "ORDER_ACCESS_DENIED"
    GARMENT_TYPE_INVALID = "GARMENT_TYPE_INVALID"

    # ---------------- MILESTONES ----------------
    MILESTONE_NOT_FOUND = "MILESTONE_NOT_FOUND"
    MILESTONE_ALREADY_REVIEWED = "MILESTONE_ALREADY_REVIEWED"
    MILESTONE_DEADLINE_PASSED = "MILESTONE_DEADLINE_PASSED"
    MILESTONE_DUPLICATE = "MILESTONE_DUPLICATE"

    # ---------------- DISPUTES ----------------
    DISPUTE_NOT_FOUND = "DISPUTE_NOT_FOUND"
    DISPUTE_NOT_ALLOWED = "DISPUTE_NOT_ALLOWED"
    DISPUTE_ALREADY_OPEN = "DISPUTE_ALREADY_OPEN"
    DISPUTE_ALREADY_RESOLVED = "DISPUTE_ALREADY_RESOLVED"

    # ---------------- ESCROW ----------------
    ESCROW_INVALID_STAGE = "ESCROW_INVALID_STAGE"
    ESCROW_AMOUNT_MISMATCH = "ESCROW_AMOUNT_MISMATCH"
    ESCROW_CALCULATION_ERROR = "ESCROW_CALCULATION_ERROR"
    ESCROW_FROZEN = "ESCROW_FROZEN"

    # ---------------- MESSAGES ----------------
    MESSAGE_INVALID = "MESSAGE_INVALID"

    # ---------------- REVIEWS ----------------
    REVIEW_NOT_FOUND = "REVIEW_NOT_FOUND"
    REVIEW_NOT_ELIGIBLE = "REVIEW_NOT_ELIGIBLE"
    REVIEW_RESPONSE_EXISTS = "REVIEW_RESPONSE_EXISTS"

    # ---------------- LOYALTY ----------------
    LOYALTY_REWARD_NOT_FOUND = "LOYALTY_REWARD_NOT_FOUND"
    LOYALTY_REWARD_INACTIVE = "LOYALTY_REWARD_INACTIVE"
    LOYALTY_INSUFFICIENT_POINTS = "LOYALTY_INSUFFICIENT_POINTS"

    # ---------------- FAMILY PROFILES ----------------
    FAMILY_PROFILE_NOT_FOUND = "FAMILY_PROFILE_NOT_FOUND"
    FAMILY_PROFILE_LIMIT_REACHED = "FAMILY_PROFILE_LIMIT_REACHED"
