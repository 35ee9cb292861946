# sew4mi/services/orders/order_progress.py
"""
Milestone progress calculator.

Pure functions over a snapshot of an order's milestones. A milestone is any
object exposing ``milestone`` (a ``MilestoneStage``) and ``approval_status``
(a ``MilestoneApprovalStatus``); ORM rows and pydantic schemas both qualify.
Nothing here touches the database or mutates its input, so callers may pass
``now`` to pin the clock.
"""

import math
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sew4mi.constants.milestones import (
    MILESTONE_ORDER,
    MILESTONE_WEIGHTS,
    MILESTONE_DURATION_DAYS,
    MILESTONE_DISPLAY,
    ETA_BUFFER_MULTIPLIER,
)
from sew4mi.models.enums.milestone_stage import MilestoneStage, MilestoneApprovalStatus
from sew4mi.models.enums.order_status import OrderStatus
from sew4mi.schemas.orders.order_schemas import OrderProgressOut
from sew4mi.utils.datetime_utils import utcnow, ensure_utc

_STAGE_INDEX = {stage: idx for idx, stage in enumerate(MILESTONE_ORDER)}

_STATUS_BY_STAGE = {
    MilestoneStage.FABRIC_SELECTED: OrderStatus.IN_PRODUCTION,
    MilestoneStage.CUTTING_STARTED: OrderStatus.IN_PRODUCTION,
    MilestoneStage.INITIAL_ASSEMBLY: OrderStatus.IN_PRODUCTION,
    MilestoneStage.FITTING_READY: OrderStatus.FITTING_READY,
    MilestoneStage.ADJUSTMENTS_COMPLETE: OrderStatus.FITTING_READY,
    MilestoneStage.FINAL_PRESSING: OrderStatus.READY_FOR_DELIVERY,
    MilestoneStage.READY_FOR_DELIVERY: OrderStatus.READY_FOR_DELIVERY,
}


def _approved_stages(milestones: Iterable) -> set:
    return {
        m.milestone
        for m in (milestones or [])
        if m.approval_status == MilestoneApprovalStatus.APPROVED
    }


# =====================================================
# PROGRESS
# =====================================================
def get_highest_completed_milestone(milestones) -> Optional[MilestoneStage]:
    approved = _approved_stages(milestones)
    if not approved:
        return None
    return max(approved, key=_STAGE_INDEX.__getitem__)


def calculate_order_progress(milestones) -> int:
    """Weight of the furthest approved stage, 0 when nothing is approved."""
    highest = get_highest_completed_milestone(milestones)
    return MILESTONE_WEIGHTS[highest] if highest else 0


def get_next_milestone(milestones) -> Optional[MilestoneStage]:
    highest = get_highest_completed_milestone(milestones)
    if highest is None:
        return MILESTONE_ORDER[0]

    next_index = _STAGE_INDEX[highest] + 1
    if next_index >= len(MILESTONE_ORDER):
        return None
    return MILESTONE_ORDER[next_index]


# =====================================================
# ETA
# =====================================================
def calculate_estimated_completion(
    milestones,
    original_estimate: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    next_stage = get_next_milestone(milestones)
    if next_stage is None:
        return None

    now = ensure_utc(now) or utcnow()

    remaining = sum(
        MILESTONE_DURATION_DAYS[stage]
        for stage in MILESTONE_ORDER[_STAGE_INDEX[next_stage]:]
    )
    buffered_days = math.ceil(remaining * ETA_BUFFER_MULTIPLIER)
    estimate = now + timedelta(days=buffered_days)

    original_estimate = ensure_utc(original_estimate)
    if original_estimate is not None and estimate > original_estimate:
        return original_estimate

    return estimate


def calculate_days_remaining(
    estimated_completion: Optional[datetime],
    now: Optional[datetime] = None,
) -> Optional[int]:
    if estimated_completion is None:
        return None

    now = ensure_utc(now) or utcnow()
    delta = ensure_utc(estimated_completion) - now
    days = math.ceil(delta.total_seconds() / 86400)
    return max(0, days)


# =====================================================
# STATUS
# =====================================================
def get_order_status_from_milestones(milestones) -> OrderStatus:
    highest = get_highest_completed_milestone(milestones)
    if highest is None:
        return OrderStatus.CREATED
    return _STATUS_BY_STAGE[highest]


def is_milestone_overdue(
    stage: MilestoneStage,
    milestones,
    order_created_at: datetime,
    now: Optional[datetime] = None,
) -> bool:
    if stage in _approved_stages(milestones):
        return False

    now = ensure_utc(now) or utcnow()
    expected_days = sum(
        MILESTONE_DURATION_DAYS[s]
        for s in MILESTONE_ORDER[: _STAGE_INDEX[stage] + 1]
    )
    expected_at = ensure_utc(order_created_at) + timedelta(days=expected_days)
    return now > expected_at


def get_overdue_milestones(milestones, order_created_at: datetime, now: Optional[datetime] = None) -> list:
    return [
        stage
        for stage in MILESTONE_ORDER
        if is_milestone_overdue(stage, milestones, order_created_at, now=now)
    ]


# =====================================================
# SNAPSHOT
# =====================================================
def generate_order_progress(
    order_id: int,
    milestones,
    original_estimate: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> OrderProgressOut:
    milestones = list(milestones or [])
    estimated = calculate_estimated_completion(milestones, original_estimate, now=now)

    return OrderProgressOut(
        order_id=order_id,
        current_status=get_order_status_from_milestones(milestones),
        progress_percentage=calculate_order_progress(milestones),
        completed_milestones=len(_approved_stages(milestones)),
        total_milestones=len(MILESTONE_ORDER),
        next_milestone=get_next_milestone(milestones),
        estimated_completion=estimated,
        days_remaining=calculate_days_remaining(estimated, now=now),
    )


def get_milestone_display_info(stage: MilestoneStage) -> dict:
    info = MILESTONE_DISPLAY[stage]
    return {
        "stage": stage,
        "name": info["name"],
        "description": info["description"],
        "weight": MILESTONE_WEIGHTS[stage],
        "expected_days": MILESTONE_DURATION_DAYS[stage],
    }
