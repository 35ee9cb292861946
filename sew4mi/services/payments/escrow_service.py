# sew4mi/services/payments/escrow_service.py

from decimal import Decimal
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sew4mi.models.orders.order_models import Order
from sew4mi.models.payments.escrow_models import EscrowTransaction
from sew4mi.models.users.user_models import User
from sew4mi.models.enums.escrow_stage import EscrowStage, EscrowTransactionType
from sew4mi.models.enums.order_status import OrderStatus
from sew4mi.models.enums.user_role import UserRole

from sew4mi.schemas.payments.escrow_schemas import (
    DepositPaymentCreate,
    EscrowStatusOut,
    EscrowTransactionOut,
    EscrowValidationOut,
)

from sew4mi.core.exceptions import AppException
from sew4mi.constants.error_codes import ErrorCode
from sew4mi.constants.activity_codes import ActivityCode
from sew4mi.utils.activity_helpers import emit_activity, actor_context
from sew4mi.utils.decimal_utils import to_decimal
from sew4mi.services.orders.order_lookup import load_order, ensure_order_party
from sew4mi.services.payments.escrow_calculator import (
    EscrowBreakdown,
    validate_escrow_breakdown,
)

logger = logging.getLogger(__name__)

# current stage -> (transaction type, next stage, amount column, paid column)
RELEASE_TRANSITIONS = {
    EscrowStage.FITTING: (
        EscrowTransactionType.FITTING_PAYMENT,
        EscrowStage.FINAL,
        "fitting_amount",
        "fitting_paid",
    ),
    EscrowStage.FINAL: (
        EscrowTransactionType.FINAL_PAYMENT,
        EscrowStage.RELEASED,
        "final_amount",
        "final_paid",
    ),
}


async def _existing_transaction(
    db: AsyncSession,
    order_id: int,
    transaction_type: EscrowTransactionType,
) -> EscrowTransaction | None:
    return await db.scalar(
        select(EscrowTransaction).where(
            EscrowTransaction.order_id == order_id,
            EscrowTransaction.transaction_type == transaction_type,
        )
    )


async def _list_transactions(db: AsyncSession, order_id: int) -> list[EscrowTransaction]:
    result = await db.execute(
        select(EscrowTransaction)
        .where(EscrowTransaction.order_id == order_id)
        .order_by(EscrowTransaction.id)
    )
    return list(result.scalars().all())


def _recompute_balance(order: Order) -> None:
    if order.escrow_stage == EscrowStage.REFUNDED:
        order.escrow_balance = Decimal("0.00")
        return

    released = order.deposit_paid + order.fitting_paid + order.final_paid
    order.escrow_balance = to_decimal(order.total_amount - released)


# =====================================================
# DEPOSIT
# =====================================================
async def record_deposit_payment(
    db: AsyncSession,
    order_id: int,
    payload: DepositPaymentCreate,
    user: User,
) -> EscrowStatusOut:
    order = await load_order(db, order_id, for_update=True)

    if user.role != UserRole.admin.value and order.customer_id != user.id:
        raise AppException(403, "Only the customer can pay the deposit", ErrorCode.ORDER_ACCESS_DENIED)

    if order.status != OrderStatus.PENDING_DEPOSIT or order.escrow_stage != EscrowStage.DEPOSIT:
        raise AppException(
            409,
            "Deposit has already been recorded for this order",
            ErrorCode.ESCROW_INVALID_STAGE,
        )

    amount = to_decimal(payload.amount)
    if amount != order.deposit_amount:
        raise AppException(
            400,
            f"Deposit must be exactly GHS {order.deposit_amount}",
            ErrorCode.ESCROW_AMOUNT_MISMATCH,
            {"expected": str(order.deposit_amount), "received": str(amount)},
        )

    db.add(
        EscrowTransaction(
            order_id=order.id,
            transaction_type=EscrowTransactionType.DEPOSIT,
            amount=amount,
            from_stage=EscrowStage.DEPOSIT,
            to_stage=EscrowStage.FITTING,
            external_reference=payload.external_reference,
            actor_id=user.id,
        )
    )

    order.deposit_paid = amount
    order.escrow_stage = EscrowStage.FITTING
    order.status = OrderStatus.DEPOSIT_PAID
    order.version += 1
    order.updated_by_id = user.id
    _recompute_balance(order)

    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=ActivityCode.RECORD_DEPOSIT,
        target_name=order.order_number,
        amount=amount,
        **actor_context(user),
    )

    await db.commit()

    logger.info(
        "Deposit recorded",
        extra={
            "order_id": order.id,
            "amount": str(amount),
            "external_reference": payload.external_reference,
        },
    )
    return await _build_status(db, order)


# =====================================================
# STAGE RELEASE
# =====================================================
async def release_stage_payment(
    db: AsyncSession,
    order: Order,
    stage: EscrowStage,
    *,
    actor: User | None = None,
) -> EscrowTransaction | None:
    """
    Release the tailor's payment for ``stage`` and advance the escrow.

    Does not commit. Returns None when the release was already made, so
    repeated approvals are harmless. Raises before touching the order when
    the stage does not match or the order is disputed.
    """
    transition = RELEASE_TRANSITIONS.get(stage)
    if transition is None:
        raise AppException(
            400,
            f"No payment is released at escrow stage {stage.value}",
            ErrorCode.ESCROW_INVALID_STAGE,
        )

    transaction_type, next_stage, amount_attr, paid_attr = transition

    if order.status == OrderStatus.DISPUTED:
        raise AppException(
            409,
            "Escrow is frozen while the order is disputed",
            ErrorCode.ESCROW_FROZEN,
        )

    existing = await _existing_transaction(db, order.id, transaction_type)
    if existing:
        logger.info(
            "Escrow release already made",
            extra={"order_id": order.id, "transaction_type": transaction_type},
        )
        return None

    if order.escrow_stage != stage:
        raise AppException(
            409,
            f"Order escrow is at {order.escrow_stage.value}, not {stage.value}",
            ErrorCode.ESCROW_INVALID_STAGE,
        )

    amount = getattr(order, amount_attr)
    tx = EscrowTransaction(
        order_id=order.id,
        transaction_type=transaction_type,
        amount=amount,
        from_stage=stage,
        to_stage=next_stage,
        actor_id=actor.id if actor else None,
    )
    db.add(tx)

    setattr(order, paid_attr, amount)
    order.escrow_stage = next_stage
    order.version += 1
    _recompute_balance(order)

    await emit_activity(
        db,
        user_id=actor.id if actor else None,
        username=actor.email if actor else "system",
        code=ActivityCode.RELEASE_PAYMENT,
        target_name=order.order_number,
        amount=amount,
        transaction_type=transaction_type.value,
    )

    logger.info(
        "Escrow payment released",
        extra={
            "order_id": order.id,
            "transaction_type": transaction_type,
            "amount": str(amount),
            "to_stage": next_stage,
        },
    )
    return tx


# =====================================================
# REFUND
# =====================================================
async def refund_deposit(
    db: AsyncSession,
    order: Order,
    *,
    actor: User | None = None,
    reason: str | None = None,
) -> EscrowTransaction | None:
    """Refund a held deposit on cancellation. Does not commit."""
    if order.deposit_paid <= 0:
        return None

    existing = await _existing_transaction(db, order.id, EscrowTransactionType.REFUND)
    if existing:
        return None

    amount = order.deposit_paid
    tx = EscrowTransaction(
        order_id=order.id,
        transaction_type=EscrowTransactionType.REFUND,
        amount=amount,
        from_stage=order.escrow_stage,
        to_stage=EscrowStage.REFUNDED,
        actor_id=actor.id if actor else None,
        notes=reason,
    )
    db.add(tx)

    order.refunded_amount = amount
    order.escrow_stage = EscrowStage.REFUNDED
    _recompute_balance(order)

    await emit_activity(
        db,
        user_id=actor.id if actor else None,
        username=actor.email if actor else "system",
        code=ActivityCode.REFUND_DEPOSIT,
        target_name=order.order_number,
        amount=amount,
    )

    logger.info("Deposit refunded", extra={"order_id": order.id, "amount": str(amount)})
    return tx


# =====================================================
# STATUS
# =====================================================
def _next_stage_amount(order: Order) -> Decimal:
    if order.escrow_stage == EscrowStage.DEPOSIT:
        return order.deposit_amount
    if order.escrow_stage == EscrowStage.FITTING:
        return order.fitting_amount
    if order.escrow_stage == EscrowStage.FINAL:
        return order.final_amount
    return Decimal("0.00")


async def _build_status(db: AsyncSession, order: Order) -> EscrowStatusOut:
    transactions = await _list_transactions(db, order.id)
    return EscrowStatusOut(
        order_id=order.id,
        order_number=order.order_number,
        stage=order.escrow_stage,
        total_amount=order.total_amount,
        deposit_amount=order.deposit_amount,
        fitting_amount=order.fitting_amount,
        final_amount=order.final_amount,
        deposit_paid=order.deposit_paid,
        fitting_paid=order.fitting_paid,
        final_paid=order.final_paid,
        refunded_amount=order.refunded_amount,
        escrow_balance=order.escrow_balance,
        next_stage_amount=_next_stage_amount(order),
        transactions=[EscrowTransactionOut.model_validate(t) for t in transactions],
    )


async def get_escrow_status(
    db: AsyncSession,
    order_id: int,
    user: User,
) -> EscrowStatusOut:
    order = await load_order(db, order_id)
    ensure_order_party(order, user)
    return await _build_status(db, order)


async def get_escrow_ledger(
    db: AsyncSession,
    order_id: int,
    user: User,
) -> tuple[Order, list[EscrowTransaction]]:
    order = await load_order(db, order_id)
    ensure_order_party(order, user)
    return order, await _list_transactions(db, order.id)


# =====================================================
# RECONCILIATION
# =====================================================
_PAID_BY_STAGE = {
    EscrowStage.DEPOSIT: (),
    EscrowStage.FITTING: ("deposit",),
    EscrowStage.FINAL: ("deposit", "fitting"),
    EscrowStage.RELEASED: ("deposit", "fitting", "final"),
}


def check_escrow_state(order: Order, transactions: list[EscrowTransaction]) -> list[str]:
    errors: list[str] = []

    breakdown = EscrowBreakdown(
        total_amount=order.total_amount,
        deposit_amount=order.deposit_amount,
        fitting_amount=order.fitting_amount,
        final_amount=order.final_amount,
    )
    if not validate_escrow_breakdown(breakdown):
        errors.append("Escrow split does not add up to the order total")

    if order.escrow_stage == EscrowStage.REFUNDED:
        if order.escrow_balance != 0:
            errors.append("Refunded escrow must have a zero balance")
        if order.refunded_amount != order.deposit_paid:
            errors.append("Refunded amount does not match the deposit paid")
    else:
        expected_paid = _PAID_BY_STAGE[order.escrow_stage]
        for part in ("deposit", "fitting", "final"):
            paid = getattr(order, f"{part}_paid")
            due = getattr(order, f"{part}_amount")
            if part in expected_paid and paid != due:
                errors.append(f"{part.capitalize()} payment should be {due} at stage {order.escrow_stage.value}, found {paid}")
            if part not in expected_paid and paid != 0:
                errors.append(f"{part.capitalize()} payment recorded before stage {order.escrow_stage.value}")

        expected_balance = order.total_amount - order.deposit_paid - order.fitting_paid - order.final_paid
        if order.escrow_balance != expected_balance:
            errors.append(f"Escrow balance {order.escrow_balance} does not match expected {expected_balance}")

    ledger_total = {t.transaction_type: t.amount for t in transactions}
    for tx_type, attr in (
        (EscrowTransactionType.DEPOSIT, "deposit_paid"),
        (EscrowTransactionType.FITTING_PAYMENT, "fitting_paid"),
        (EscrowTransactionType.FINAL_PAYMENT, "final_paid"),
        (EscrowTransactionType.REFUND, "refunded_amount"),
    ):
        if ledger_total.get(tx_type, Decimal("0.00")) != getattr(order, attr):
            errors.append(f"Ledger {tx_type.value} does not match order {attr}")

    return errors


async def validate_escrow_state(db: AsyncSession, order_id: int) -> EscrowValidationOut:
    order = await load_order(db, order_id)
    transactions = await _list_transactions(db, order.id)
    errors = check_escrow_state(order, transactions)

    if errors:
        logger.warning(
            "Escrow state inconsistent",
            extra={"order_id": order.id, "errors": errors},
        )

    return EscrowValidationOut(order_id=order.id, is_valid=not errors, errors=errors)
