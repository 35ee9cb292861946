from sew4mi.constants.activity_codes import ActivityCode


ACTIVITY_TEMPLATES = {
    # ---------------- ORDERS ----------------
    ActivityCode.CREATE_ORDER:
        "{actor_role} ({actor_email}) placed order {target_name} worth GHS {amount}",

    ActivityCode.CANCEL_ORDER:
        "{actor_role} ({actor_email}) cancelled order {target_name}",

    ActivityCode.CONFIRM_DELIVERY:
        "{actor_role} ({actor_email}) confirmed delivery of order {target_name}",

    # ---------------- MILESTONES ----------------
    ActivityCode.SUBMIT_MILESTONE:
        "{actor_role} ({actor_email}) submitted milestone {milestone} for order {target_name}",

    ActivityCode.APPROVE_MILESTONE:
        "{actor_role} ({actor_email}) approved milestone {milestone} for order {target_name}",

    ActivityCode.REJECT_MILESTONE:
        "{actor_role} ({actor_email}) rejected milestone {milestone} for order {target_name}: {reason}",

    ActivityCode.AUTO_APPROVE_MILESTONE:
        "System auto-approved milestone {milestone} for order {target_name} after deadline",

    # ---------------- DISPUTES ----------------
    ActivityCode.OPEN_DISPUTE:
        "{actor_role} ({actor_email}) disputed milestone {milestone} on order {target_name}",

    ActivityCode.RESOLVE_DISPUTE:
        "{actor_role} ({actor_email}) resolved the dispute on order {target_name} with {resolution}",

    # ---------------- ESCROW ----------------
    ActivityCode.RECORD_DEPOSIT:
        "{actor_role} ({actor_email}) recorded deposit of GHS {amount} for order {target_name}",

    ActivityCode.RELEASE_PAYMENT:
        "Released GHS {amount} ({transaction_type}) to tailor for order {target_name}",

    ActivityCode.REFUND_DEPOSIT:
        "Refunded GHS {amount} deposit for order {target_name}",

    # ---------------- REVIEWS ----------------
    ActivityCode.SUBMIT_REVIEW:
        "{actor_role} ({actor_email}) reviewed order {target_name} with {rating} stars",

    ActivityCode.MODERATE_REVIEW:
        "{actor_role} ({actor_email}) set review {target_name} to {status}",

    # ---------------- LOYALTY ----------------
    ActivityCode.REDEEM_REWARD:
        "{actor_role} ({actor_email}) redeemed {target_name} for {points} points",

    # ---------------- FAMILY PROFILES ----------------
    ActivityCode.CREATE_FAMILY_PROFILE:
        "{actor_role} ({actor_email}) added family profile {target_name}",

    ActivityCode.UPDATE_FAMILY_PROFILE:
        "{actor_role} ({actor_email}) updated family profile {target_name}",

    ActivityCode.DELETE_FAMILY_PROFILE:
        "{actor_role} ({actor_email}) removed family profile {target_name}",
}
