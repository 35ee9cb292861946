# sew4mi/models/enums/escrow_stage.py
import enum


class EscrowStage(str, enum.Enum):
    DEPOSIT = "DEPOSIT"
    FITTING = "FITTING"
    FINAL = "FINAL"
    RELEASED = "RELEASED"
    REFUNDED = "REFUNDED"


class EscrowTransactionType(str, enum.Enum):
    DEPOSIT = "DEPOSIT"
    FITTING_PAYMENT = "FITTING_PAYMENT"
    FINAL_PAYMENT = "FINAL_PAYMENT"
    REFUND = "REFUND"
