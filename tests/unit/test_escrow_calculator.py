from decimal import Decimal
from types import SimpleNamespace

import pytest

from sew4mi.models.enums.escrow_stage import EscrowStage, EscrowTransactionType
from sew4mi.services.payments.escrow_calculator import (
    EscrowBreakdown,
    EscrowCalculationError,
    calculate_escrow_breakdown,
    get_stage_amount,
    validate_escrow_breakdown,
)
from sew4mi.services.payments.escrow_service import check_escrow_state


def test_breakdown_splits_25_50_25():
    b = calculate_escrow_breakdown(Decimal("200.00"))
    assert (b.deposit_amount, b.fitting_amount, b.final_amount) == (
        Decimal("50.00"),
        Decimal("100.00"),
        Decimal("50.00"),
    )


def test_final_stage_absorbs_rounding():
    b = calculate_escrow_breakdown("123.45")
    assert b.deposit_amount == Decimal("30.86")
    assert b.fitting_amount == Decimal("61.73")
    assert b.final_amount == Decimal("30.86")
    assert b.deposit_amount + b.fitting_amount + b.final_amount == Decimal("123.45")
    assert validate_escrow_breakdown(b)


@pytest.mark.parametrize("bad", [0, -10, "abc", None, float("nan"), float("inf")])
def test_invalid_totals_rejected(bad):
    with pytest.raises(EscrowCalculationError):
        calculate_escrow_breakdown(bad)


def test_stage_amounts():
    assert get_stage_amount(100, EscrowStage.DEPOSIT) == Decimal("25.00")
    assert get_stage_amount(100, EscrowStage.FITTING) == Decimal("50.00")
    assert get_stage_amount(100, EscrowStage.FINAL) == Decimal("25.00")
    assert get_stage_amount(100, EscrowStage.RELEASED) == Decimal("0.00")

    with pytest.raises(EscrowCalculationError):
        get_stage_amount(100, EscrowStage.REFUNDED)


def test_validate_rejects_bad_split():
    broken = EscrowBreakdown(
        total_amount=Decimal("100.00"),
        deposit_amount=Decimal("25.00"),
        fitting_amount=Decimal("50.00"),
        final_amount=Decimal("24.00"),
    )
    assert not validate_escrow_breakdown(broken)

    negative = EscrowBreakdown(
        total_amount=Decimal("100.00"),
        deposit_amount=Decimal("-25.00"),
        fitting_amount=Decimal("100.00"),
        final_amount=Decimal("25.00"),
    )
    assert not validate_escrow_breakdown(negative)


# =====================================================
# RECONCILIATION
# =====================================================
def _order(**overrides):
    values = dict(
        total_amount=Decimal("100.00"),
        deposit_amount=Decimal("25.00"),
        fitting_amount=Decimal("50.00"),
        final_amount=Decimal("25.00"),
        escrow_stage=EscrowStage.FINAL,
        deposit_paid=Decimal("25.00"),
        fitting_paid=Decimal("50.00"),
        final_paid=Decimal("0.00"),
        refunded_amount=Decimal("0.00"),
        escrow_balance=Decimal("25.00"),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def _tx(tx_type, amount):
    return SimpleNamespace(transaction_type=tx_type, amount=Decimal(amount))


def test_consistent_state_has_no_errors():
    txs = [
        _tx(EscrowTransactionType.DEPOSIT, "25.00"),
        _tx(EscrowTransactionType.FITTING_PAYMENT, "50.00"),
    ]
    assert check_escrow_state(_order(), txs) == []


def test_missing_ledger_entry_reported():
    txs = [_tx(EscrowTransactionType.DEPOSIT, "25.00")]
    errors = check_escrow_state(_order(), txs)
    assert any("FITTING_PAYMENT" in e for e in errors)


def test_wrong_balance_reported():
    txs = [
        _tx(EscrowTransactionType.DEPOSIT, "25.00"),
        _tx(EscrowTransactionType.FITTING_PAYMENT, "50.00"),
    ]
    errors = check_escrow_state(_order(escrow_balance=Decimal("40.00")), txs)
    assert any("balance" in e for e in errors)


def test_refunded_order_must_have_zero_balance():
    order = _order(
        escrow_stage=EscrowStage.REFUNDED,
        fitting_paid=Decimal("0.00"),
        refunded_amount=Decimal("25.00"),
        escrow_balance=Decimal("0.00"),
    )
    txs = [
        _tx(EscrowTransactionType.DEPOSIT, "25.00"),
        _tx(EscrowTransactionType.REFUND, "25.00"),
    ]
    assert check_escrow_state(order, txs) == []

    order.escrow_balance = Decimal("75.00")
    assert "Refunded escrow must have a zero balance" in check_escrow_state(order, txs)
