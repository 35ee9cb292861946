# sew4mi/models/enums/dispute_status.py
import enum


class DisputeStatus(str, enum.Enum):
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"


class DisputeResolutionType(str, enum.Enum):
    # production continues, the order returns to its milestone-derived status
    ORDER_COMPLETION = "ORDER_COMPLETION"
    # held deposit goes back to the customer and the order is cancelled
    FULL_REFUND = "FULL_REFUND"
