from datetime import timedelta
from decimal import Decimal

import pytest

from sew4mi.core.exceptions import AppException
from sew4mi.constants.error_codes import ErrorCode
from sew4mi.models.orders.order_models import Order
from sew4mi.models.enums.escrow_stage import EscrowStage
from sew4mi.models.enums.milestone_stage import MilestoneStage, MilestoneApprovalStatus
from sew4mi.models.enums.order_status import OrderStatus, FabricChoice
from sew4mi.schemas.orders.order_schemas import OrderCreate, OrderCancel
from sew4mi.schemas.orders.milestone_schemas import MilestoneSubmit, MilestoneReview
from sew4mi.schemas.payments.escrow_schemas import DepositPaymentCreate
from sew4mi.services.orders.order_service import create_order, cancel_order, confirm_delivery, get_order_progress
from sew4mi.services.orders.milestone_service import (
    submit_milestone,
    review_milestone,
    auto_approve_expired_milestones,
    get_milestone_approval_history,
)
from sew4mi.services.payments.escrow_service import record_deposit_payment, validate_escrow_state
from sew4mi.services.loyalty.loyalty_service import get_account
from sew4mi.utils.datetime_utils import utcnow


async def _paid_order(db, customer, tailor):
    order = await create_order(
        db,
        OrderCreate(tailor_id=tailor.id, garment_type="kente-shirt", fabric_choice=FabricChoice.TAILOR_SOURCED),
        customer,
    )
    await record_deposit_payment(db, order.id, DepositPaymentCreate(amount=Decimal("32.50")), customer)
    return order


async def test_create_order_prices_and_holds_full_total(db, customer, tailor):
    order = await create_order(
        db,
        OrderCreate(tailor_id=tailor.id, garment_type="kente-shirt", fabric_choice=FabricChoice.TAILOR_SOURCED),
        customer,
    )

    assert order.order_number == f"ORD-{order.id:06d}"
    assert order.status == OrderStatus.PENDING_DEPOSIT
    assert order.total_amount == Decimal("130.00")
    assert order.escrow_stage == EscrowStage.DEPOSIT

    row = await db.get(Order, order.id)
    assert row.escrow_balance == Decimal("130.00")


async def test_order_requires_active_tailor(db, customer, make_user):
    other_customer = await make_user("customer")
    with pytest.raises(AppException) as exc:
        await create_order(db, OrderCreate(tailor_id=other_customer.id, garment_type="dashiki"), customer)
    assert exc.value.error_code == ErrorCode.TAILOR_NOT_FOUND


async def test_deposit_must_match_exactly(db, customer, tailor):
    order = await create_order(db, OrderCreate(tailor_id=tailor.id, garment_type="dashiki"), customer)

    with pytest.raises(AppException) as exc:
        await record_deposit_payment(db, order.id, DepositPaymentCreate(amount=Decimal("10.00")), customer)
    assert exc.value.status_code == 400
    assert exc.value.error_code == ErrorCode.ESCROW_AMOUNT_MISMATCH
    assert exc.value.details["expected"] == "15.00"

    status = await record_deposit_payment(db, order.id, DepositPaymentCreate(amount=Decimal("15.00")), customer)
    assert status.stage == EscrowStage.FITTING
    assert status.escrow_balance == Decimal("45.00")
    assert status.next_stage_amount == Decimal("30.00")

    with pytest.raises(AppException) as exc:
        await record_deposit_payment(db, order.id, DepositPaymentCreate(amount=Decimal("15.00")), customer)
    assert exc.value.status_code == 409


async def test_milestones_need_paid_deposit(db, customer, tailor):
    order = await create_order(db, OrderCreate(tailor_id=tailor.id, garment_type="dashiki"), customer)

    with pytest.raises(AppException) as exc:
        await submit_milestone(db, order.id, MilestoneSubmit(milestone=MilestoneStage.FABRIC_SELECTED), tailor)
    assert exc.value.error_code == ErrorCode.ORDER_INVALID_STATE


async def test_only_assigned_tailor_submits(db, customer, tailor, make_user):
    order = await _paid_order(db, customer, tailor)
    stranger = await make_user("tailor")

    with pytest.raises(AppException) as exc:
        await submit_milestone(db, order.id, MilestoneSubmit(milestone=MilestoneStage.FABRIC_SELECTED), stranger)
    assert exc.value.status_code == 403


async def test_duplicate_pending_milestone_rejected(db, customer, tailor):
    order = await _paid_order(db, customer, tailor)
    await submit_milestone(db, order.id, MilestoneSubmit(milestone=MilestoneStage.FABRIC_SELECTED), tailor)

    with pytest.raises(AppException) as exc:
        await submit_milestone(db, order.id, MilestoneSubmit(milestone=MilestoneStage.FABRIC_SELECTED), tailor)
    assert exc.value.error_code == ErrorCode.MILESTONE_DUPLICATE


async def test_rejected_milestone_can_be_resubmitted(db, customer, tailor):
    order = await _paid_order(db, customer, tailor)
    first = await submit_milestone(db, order.id, MilestoneSubmit(milestone=MilestoneStage.FABRIC_SELECTED), tailor)

    result = await review_milestone(
        db, first.id, MilestoneReview(action="REJECTED", comment="Wrong colour"), customer
    )
    assert result.milestone.approval_status == MilestoneApprovalStatus.REJECTED
    assert result.milestone.rejection_reason == "Wrong colour"
    assert result.progress_percentage == 0
    assert result.order_status == OrderStatus.DEPOSIT_PAID.value

    second = await submit_milestone(db, order.id, MilestoneSubmit(milestone=MilestoneStage.FABRIC_SELECTED), tailor)
    assert second.id != first.id


async def test_fitting_approval_releases_fitting_payment(db, customer, tailor):
    order = await _paid_order(db, customer, tailor)
    milestone = await submit_milestone(db, order.id, MilestoneSubmit(milestone=MilestoneStage.FITTING_READY), tailor)

    result = await review_milestone(db, milestone.id, MilestoneReview(action="APPROVED"), customer)

    assert result.payment_triggered is True
    assert result.progress_percentage == 50
    assert result.order_status == OrderStatus.FITTING_READY.value

    row = await db.get(Order, order.id)
    assert row.escrow_stage == EscrowStage.FINAL
    assert row.fitting_paid == Decimal("65.00")
    assert row.escrow_balance == Decimal("32.50")

    check = await validate_escrow_state(db, order.id)
    assert check.is_valid, check.errors

    history = await get_milestone_approval_history(db, milestone.id, customer)
    assert [h.action.value for h in history] == ["APPROVED"]


async def test_review_closed_after_deadline(db, customer, tailor):
    order = await _paid_order(db, customer, tailor)
    milestone = await submit_milestone(db, order.id, MilestoneSubmit(milestone=MilestoneStage.FABRIC_SELECTED), tailor)

    with pytest.raises(AppException) as exc:
        await review_milestone(
            db,
            milestone.id,
            MilestoneReview(action="APPROVED"),
            customer,
            now=utcnow() + timedelta(hours=49),
        )
    assert exc.value.error_code == ErrorCode.MILESTONE_DEADLINE_PASSED


async def test_auto_approval_releases_final_payment(db, customer, tailor):
    order = await _paid_order(db, customer, tailor)

    fitting = await submit_milestone(db, order.id, MilestoneSubmit(milestone=MilestoneStage.FITTING_READY), tailor)
    await review_milestone(db, fitting.id, MilestoneReview(action="APPROVED"), customer)
    await submit_milestone(db, order.id, MilestoneSubmit(milestone=MilestoneStage.READY_FOR_DELIVERY), tailor)

    # nothing is due yet
    early = await auto_approve_expired_milestones(db)
    assert early.processed == 0

    result = await auto_approve_expired_milestones(db, now=utcnow() + timedelta(hours=49))
    assert (result.processed, result.approved, result.failed) == (1, 1, 0)

    row = await db.get(Order, order.id)
    assert row.escrow_stage == EscrowStage.RELEASED
    assert row.escrow_balance == Decimal("0.00")
    assert row.status == OrderStatus.READY_FOR_DELIVERY

    db.expunge_all()
    progress = await get_order_progress(db, order.id, customer)
    assert progress.progress.progress_percentage == 100
    assert progress.progress.next_milestone is None


async def test_delivery_awards_points(db, customer, tailor):
    order = await _paid_order(db, customer, tailor)
    final = await submit_milestone(db, order.id, MilestoneSubmit(milestone=MilestoneStage.READY_FOR_DELIVERY), tailor)
    await review_milestone(db, final.id, MilestoneReview(action="APPROVED"), customer)

    delivered = await confirm_delivery(db, order.id, customer)
    assert delivered.status == OrderStatus.DELIVERED
    assert delivered.actual_delivery is not None

    account = await get_account(db, customer)
    assert account.available_points == 130
    assert account.lifetime_points == 130
    assert account.completed_orders == 1
    assert account.next_tier.value == "SILVER"
    assert account.points_to_next_tier == 870


async def test_cancel_refunds_deposit(db, customer, tailor):
    order = await _paid_order(db, customer, tailor)

    cancelled = await cancel_order(db, order.id, OrderCancel(reason="Changed my mind"), customer)
    assert cancelled.status == OrderStatus.CANCELLED
    assert cancelled.escrow_stage == EscrowStage.REFUNDED

    row = await db.get(Order, order.id)
    assert row.refunded_amount == Decimal("32.50")
    assert row.escrow_balance == Decimal("0.00")

    check = await validate_escrow_state(db, order.id)
    assert check.is_valid, check.errors

    with pytest.raises(AppException) as exc:
        await cancel_order(db, order.id, OrderCancel(), customer)
    assert exc.value.status_code == 409


async def test_cancel_closes_pending_milestones(db, customer, tailor):
    order = await _paid_order(db, customer, tailor)
    fabric = await submit_milestone(db, order.id, MilestoneSubmit(milestone=MilestoneStage.FABRIC_SELECTED), tailor)
    cutting = await submit_milestone(db, order.id, MilestoneSubmit(milestone=MilestoneStage.CUTTING_STARTED), tailor)

    await cancel_order(db, order.id, OrderCancel(reason="Travelling abroad"), customer)

    with pytest.raises(AppException) as exc:
        await review_milestone(db, fabric.id, MilestoneReview(action="APPROVED"), customer)
    assert exc.value.status_code == 409

    result = await auto_approve_expired_milestones(db, now=utcnow() + timedelta(hours=49))
    assert (result.processed, result.approved) == (0, 0)

    for milestone_id in (fabric.id, cutting.id):
        history = await get_milestone_approval_history(db, milestone_id, customer)
        assert [(h.action.value, h.comment) for h in history] == [("REJECTED", "Order cancelled")]

    row = await db.get(Order, order.id)
    assert row.status == OrderStatus.CANCELLED
    assert row.escrow_stage == EscrowStage.REFUNDED


async def test_milestones_frozen_on_closed_order(db, customer, tailor):
    order = await _paid_order(db, customer, tailor)
    fabric = await submit_milestone(db, order.id, MilestoneSubmit(milestone=MilestoneStage.FABRIC_SELECTED), tailor)

    row = await db.get(Order, order.id)
    row.status = OrderStatus.CANCELLED
    await db.commit()

    with pytest.raises(AppException) as exc:
        await review_milestone(db, fabric.id, MilestoneReview(action="APPROVED"), customer)
    assert exc.value.error_code == ErrorCode.ORDER_INVALID_STATE

    result = await auto_approve_expired_milestones(db, now=utcnow() + timedelta(hours=49))
    assert result.processed == 0

    history = await get_milestone_approval_history(db, fabric.id, customer)
    assert history == []
