# sew4mi/models/enums/order_status.py
import enum


class OrderStatus(str, enum.Enum):
    PENDING_DEPOSIT = "PENDING_DEPOSIT"
    DEPOSIT_PAID = "DEPOSIT_PAID"
    CREATED = "CREATED"
    IN_PRODUCTION = "IN_PRODUCTION"
    FITTING_READY = "FITTING_READY"
    READY_FOR_DELIVERY = "READY_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    DISPUTED = "DISPUTED"


class FabricChoice(str, enum.Enum):
    CUSTOMER_PROVIDED = "CUSTOMER_PROVIDED"
    TAILOR_SOURCED = "TAILOR_SOURCED"


class UrgencyLevel(str, enum.Enum):
    STANDARD = "STANDARD"
    EXPRESS = "EXPRESS"
