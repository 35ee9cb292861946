from enum import Enum


class ActivityCode(str, Enum):
    # ---------------- ORDERS ----------------
    CREATE_ORDER = "CREATE_ORDER"
    CANCEL_ORDER = "CANCEL_ORDER"
    CONFIRM_DELIVERY = "CONFIRM_DELIVERY"

    # ---------------- MILESTONES ----------------
    SUBMIT_MILESTONE = "SUBMIT_MILESTONE"
    APPROVE_MILESTONE = "APPROVE_MILESTONE"
    REJECT_MILESTONE = "REJECT_MILESTONE"
    AUTO_APPROVE_MILESTONE = "AUTO_APPROVE_MILESTONE"

    # ---------------- DISPUTES ----------------
    OPEN_DISPUTE = "OPEN_DISPUTE"
    RESOLVE_DISPUTE = "RESOLVE_DISPUTE"

    # ---------------- ESCROW ----------------
    RECORD_DEPOSIT = "RECORD_DEPOSIT"
    RELEASE_PAYMENT = "RELEASE_PAYMENT"
    REFUND_DEPOSIT = "REFUND_DEPOSIT"

    # ---------------- REVIEWS ----------------
    SUBMIT_REVIEW = "SUBMIT_REVIEW"
    MODERATE_REVIEW = "MODERATE_REVIEW"

    # ---------------- LOYALTY ----------------
    REDEEM_REWARD = "REDEEM_REWARD"

    # ---------------- FAMILY PROFILES ----------------
    CREATE_FAMILY_PROFILE = "CREATE_FAMILY_PROFILE"
    UPDATE_FAMILY_PROFILE = "UPDATE_FAMILY_PROFILE"
    DELETE_FAMILY_PROFILE = "DELETE_FAMILY_PROFILE"
