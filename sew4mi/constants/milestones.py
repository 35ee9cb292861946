from decimal import Decimal

from sew4mi.models.enums.milestone_stage import MilestoneStage


MILESTONE_ORDER = [
    MilestoneStage.FABRIC_SELECTED,
    MilestoneStage.CUTTING_STARTED,
    MilestoneStage.INITIAL_ASSEMBLY,
    MilestoneStage.FITTING_READY,
    MilestoneStage.ADJUSTMENTS_COMPLETE,
    MilestoneStage.FINAL_PRESSING,
    MilestoneStage.READY_FOR_DELIVERY,
]

# cumulative progress once the stage is approved
MILESTONE_WEIGHTS = {
    MilestoneStage.FABRIC_SELECTED: 10,
    MilestoneStage.CUTTING_STARTED: 20,
    MilestoneStage.INITIAL_ASSEMBLY: 35,
    MilestoneStage.FITTING_READY: 50,
    MilestoneStage.ADJUSTMENTS_COMPLETE: 75,
    MilestoneStage.FINAL_PRESSING: 90,
    MilestoneStage.READY_FOR_DELIVERY: 100,
}

# typical working days spent in each stage
MILESTONE_DURATION_DAYS = {
    MilestoneStage.FABRIC_SELECTED: 1,
    MilestoneStage.CUTTING_STARTED: 2,
    MilestoneStage.INITIAL_ASSEMBLY: 5,
    MilestoneStage.FITTING_READY: 3,
    MilestoneStage.ADJUSTMENTS_COMPLETE: 4,
    MilestoneStage.FINAL_PRESSING: 1,
    MilestoneStage.READY_FOR_DELIVERY: 1,
}

ETA_BUFFER_MULTIPLIER = Decimal("1.2")

MILESTONE_DISPLAY = {
    MilestoneStage.FABRIC_SELECTED: {
        "name": "Fabric Selected",
        "description": "Fabric has been chosen and prepared",
    },
    MilestoneStage.CUTTING_STARTED: {
        "name": "Cutting Started",
        "description": "Pattern cutting has begun",
    },
    MilestoneStage.INITIAL_ASSEMBLY: {
        "name": "Initial Assembly",
        "description": "Basic garment construction underway",
    },
    MilestoneStage.FITTING_READY: {
        "name": "Fitting Ready",
        "description": "Ready for fitting and adjustments",
    },
    MilestoneStage.ADJUSTMENTS_COMPLETE: {
        "name": "Adjustments Complete",
        "description": "All modifications have been made",
    },
    MilestoneStage.FINAL_PRESSING: {
        "name": "Final Pressing",
        "description": "Final finishing and quality checks",
    },
    MilestoneStage.READY_FOR_DELIVERY: {
        "name": "Ready for Delivery",
        "description": "Garment is complete and ready",
    },
}
