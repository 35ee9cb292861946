# sew4mi/services/payments/escrow_calculator.py

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from sew4mi.constants.escrow import DEPOSIT_PERCENTAGE, FITTING_PERCENTAGE
from sew4mi.models.enums.escrow_stage import EscrowStage
from sew4mi.utils.decimal_utils import to_decimal, percent_of


class EscrowCalculationError(ValueError):
    pass


@dataclass(frozen=True)
class EscrowBreakdown:
    total_amount: Decimal
    deposit_amount: Decimal
    fitting_amount: Decimal
    final_amount: Decimal


def _as_amount(total) -> Decimal:
    try:
        amount = Decimal(str(total))
    except (InvalidOperation, TypeError, ValueError):
        raise EscrowCalculationError(f"Invalid escrow total: {total!r}")

    if not amount.is_finite() or amount <= 0:
        raise EscrowCalculationError("Escrow total must be a positive finite amount")

    return to_decimal(amount)


def calculate_escrow_breakdown(total) -> EscrowBreakdown:
    """Split an order total 25/50/25. The final stage absorbs rounding."""
    amount = _as_amount(total)

    deposit = percent_of(amount, DEPOSIT_PERCENTAGE)
    fitting = percent_of(amount, FITTING_PERCENTAGE)
    final = amount - deposit - fitting

    return EscrowBreakdown(
        total_amount=amount,
        deposit_amount=deposit,
        fitting_amount=fitting,
        final_amount=final,
    )


def get_stage_amount(total, stage: EscrowStage) -> Decimal:
    breakdown = calculate_escrow_breakdown(total)

    if stage == EscrowStage.DEPOSIT:
        return breakdown.deposit_amount
    if stage == EscrowStage.FITTING:
        return breakdown.fitting_amount
    if stage == EscrowStage.FINAL:
        return breakdown.final_amount
    if stage == EscrowStage.RELEASED:
        return Decimal("0.00")

    raise EscrowCalculationError(f"No payment is due at escrow stage {stage}")


def validate_escrow_breakdown(breakdown: EscrowBreakdown) -> bool:
    parts = (breakdown.deposit_amount, breakdown.fitting_amount, breakdown.final_amount)
    if any(p < 0 for p in parts):
        return False
    return sum(parts) == breakdown.total_amount
