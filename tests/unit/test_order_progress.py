from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from sew4mi.models.enums.milestone_stage import MilestoneStage, MilestoneApprovalStatus
from sew4mi.models.enums.order_status import OrderStatus
from sew4mi.constants.milestones import MILESTONE_ORDER
from sew4mi.services.orders.order_progress import (
    get_highest_completed_milestone,
    calculate_order_progress,
    get_next_milestone,
    calculate_estimated_completion,
    calculate_days_remaining,
    get_order_status_from_milestones,
    is_milestone_overdue,
    get_overdue_milestones,
    generate_order_progress,
    get_milestone_display_info,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def ms(stage, status=MilestoneApprovalStatus.APPROVED):
    return SimpleNamespace(milestone=stage, approval_status=status)


def test_no_milestones_means_no_progress():
    assert calculate_order_progress([]) == 0
    assert get_highest_completed_milestone([]) is None
    assert get_next_milestone([]) == MilestoneStage.FABRIC_SELECTED
    assert get_order_status_from_milestones([]) == OrderStatus.CREATED


def test_progress_uses_furthest_approved_stage():
    milestones = [
        ms(MilestoneStage.FABRIC_SELECTED),
        ms(MilestoneStage.CUTTING_STARTED),
        ms(MilestoneStage.INITIAL_ASSEMBLY),
    ]
    assert calculate_order_progress(milestones) == 35
    assert get_next_milestone(milestones) == MilestoneStage.FITTING_READY
    assert get_order_status_from_milestones(milestones) == OrderStatus.IN_PRODUCTION


def test_progress_ignores_pending_and_rejected():
    milestones = [
        ms(MilestoneStage.FABRIC_SELECTED),
        ms(MilestoneStage.CUTTING_STARTED, MilestoneApprovalStatus.PENDING),
        ms(MilestoneStage.FITTING_READY, MilestoneApprovalStatus.REJECTED),
    ]
    assert calculate_order_progress(milestones) == 10
    assert get_highest_completed_milestone(milestones) == MilestoneStage.FABRIC_SELECTED


def test_out_of_order_approval_jumps_to_highest_stage():
    milestones = [ms(MilestoneStage.FITTING_READY)]
    assert calculate_order_progress(milestones) == 50
    assert get_order_status_from_milestones(milestones) == OrderStatus.FITTING_READY


def test_final_stage_completes_order():
    milestones = [ms(MilestoneStage.READY_FOR_DELIVERY)]
    assert calculate_order_progress(milestones) == 100
    assert get_next_milestone(milestones) is None
    assert calculate_estimated_completion(milestones, now=NOW) is None
    assert get_order_status_from_milestones(milestones) == OrderStatus.READY_FOR_DELIVERY


def test_status_mapping_for_late_stages():
    assert get_order_status_from_milestones([ms(MilestoneStage.ADJUSTMENTS_COMPLETE)]) == OrderStatus.FITTING_READY
    assert get_order_status_from_milestones([ms(MilestoneStage.FINAL_PRESSING)]) == OrderStatus.READY_FOR_DELIVERY


def test_estimated_completion_buffers_remaining_days():
    # 17 remaining days * 1.2 = 20.4 -> 21
    assert calculate_estimated_completion([], now=NOW) == NOW + timedelta(days=21)

    # after INITIAL_ASSEMBLY: 3 + 4 + 1 + 1 = 9 days * 1.2 = 10.8 -> 11
    milestones = [ms(MilestoneStage.INITIAL_ASSEMBLY)]
    assert calculate_estimated_completion(milestones, now=NOW) == NOW + timedelta(days=11)


def test_estimated_completion_capped_by_original_estimate():
    original = NOW + timedelta(days=5)
    assert calculate_estimated_completion([], original_estimate=original, now=NOW) == original

    later = NOW + timedelta(days=60)
    assert calculate_estimated_completion([], original_estimate=later, now=NOW) == NOW + timedelta(days=21)


def test_naive_original_estimate_treated_as_utc():
    original = datetime(2026, 3, 3, 12, 0)
    assert calculate_estimated_completion([], original_estimate=original, now=NOW) == original.replace(tzinfo=timezone.utc)


def test_days_remaining_rounds_up_and_never_negative():
    assert calculate_days_remaining(None, now=NOW) is None
    assert calculate_days_remaining(NOW + timedelta(days=2, hours=1), now=NOW) == 3
    assert calculate_days_remaining(NOW - timedelta(days=4), now=NOW) == 0


def test_overdue_detection():
    created = NOW - timedelta(days=4)
    # FABRIC_SELECTED expected after 1 day, CUTTING_STARTED after 3
    assert is_milestone_overdue(MilestoneStage.FABRIC_SELECTED, [], created, now=NOW)
    assert is_milestone_overdue(MilestoneStage.CUTTING_STARTED, [], created, now=NOW)
    assert not is_milestone_overdue(MilestoneStage.INITIAL_ASSEMBLY, [], created, now=NOW)

    approved = [ms(MilestoneStage.FABRIC_SELECTED)]
    assert not is_milestone_overdue(MilestoneStage.FABRIC_SELECTED, approved, created, now=NOW)
    assert get_overdue_milestones(approved, created, now=NOW) == [MilestoneStage.CUTTING_STARTED]


def test_generate_order_progress_snapshot():
    milestones = [ms(MilestoneStage.FABRIC_SELECTED), ms(MilestoneStage.CUTTING_STARTED)]
    progress = generate_order_progress(42, milestones, now=NOW)

    assert progress.order_id == 42
    assert progress.progress_percentage == 20
    assert progress.completed_milestones == 2
    assert progress.total_milestones == 7
    assert progress.next_milestone == MilestoneStage.INITIAL_ASSEMBLY
    assert progress.current_status == OrderStatus.IN_PRODUCTION
    # 5 + 3 + 4 + 1 + 1 = 14 days * 1.2 = 16.8 -> 17
    assert progress.estimated_completion == NOW + timedelta(days=17)
    assert progress.days_remaining == 17


def test_generate_order_progress_does_not_mutate_input():
    milestones = [ms(MilestoneStage.FABRIC_SELECTED)]
    generate_order_progress(1, milestones, now=NOW)
    assert len(milestones) == 1
    assert milestones[0].approval_status == MilestoneApprovalStatus.APPROVED


def test_display_info():
    info = get_milestone_display_info(MilestoneStage.FITTING_READY)
    assert info["name"] == "Fitting Ready"
    assert info["weight"] == 50
    assert info["expected_days"] == 3


@pytest.mark.parametrize(
    "approved_count, weight, eta_days",
    [
        (1, 10, 20),
        (2, 20, 17),
        (3, 35, 11),
        (4, 50, 8),
        (5, 75, 3),
        (6, 90, 2),
        (7, 100, None),
    ],
)
def test_first_stages_approved_in_order(approved_count, weight, eta_days):
    milestones = [ms(stage) for stage in MILESTONE_ORDER[:approved_count]]

    assert calculate_order_progress(milestones) == weight
    assert get_highest_completed_milestone(milestones) == MILESTONE_ORDER[approved_count - 1]

    expected_next = MILESTONE_ORDER[approved_count] if approved_count < len(MILESTONE_ORDER) else None
    assert get_next_milestone(milestones) == expected_next

    eta = calculate_estimated_completion(milestones, now=NOW)
    assert (eta is None) == (expected_next is None)
    if eta_days is not None:
        assert eta == NOW + timedelta(days=eta_days)


def test_four_stages_reach_fitting_weight():
    milestones = [ms(stage) for stage in MILESTONE_ORDER[:4]]
    assert calculate_order_progress(milestones) == 50
    assert get_next_milestone(milestones) == MilestoneStage.ADJUSTMENTS_COMPLETE
