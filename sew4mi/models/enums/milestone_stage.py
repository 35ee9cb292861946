# sew4mi/models/enums/milestone_stage.py
import enum


class MilestoneStage(str, enum.Enum):
    FABRIC_SELECTED = "FABRIC_SELECTED"
    CUTTING_STARTED = "CUTTING_STARTED"
    INITIAL_ASSEMBLY = "INITIAL_ASSEMBLY"
    FITTING_READY = "FITTING_READY"
    ADJUSTMENTS_COMPLETE = "ADJUSTMENTS_COMPLETE"
    FINAL_PRESSING = "FINAL_PRESSING"
    READY_FOR_DELIVERY = "READY_FOR_DELIVERY"


class MilestoneApprovalStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class MilestoneApprovalAction(str, enum.Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    AUTO_APPROVED = "AUTO_APPROVED"
