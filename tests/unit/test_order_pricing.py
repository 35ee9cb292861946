from decimal import Decimal

import pytest

from sew4mi.core.exceptions import AppException
from sew4mi.models.enums.order_status import FabricChoice, UrgencyLevel
from sew4mi.services.orders.order_service import (
    calculate_order_pricing,
    estimate_delivery_days,
    list_garment_types,
)


def test_catalogue_lists_all_garments():
    ids = {g.id for g in list_garment_types()}
    assert "kente-shirt" in ids
    assert len(ids) == 8


def test_customer_fabric_standard_order():
    pricing = calculate_order_pricing("custom-suit", FabricChoice.CUSTOMER_PROVIDED, UrgencyLevel.STANDARD)
    assert pricing.total_amount == Decimal("300.00")
    assert pricing.fabric_cost == Decimal("0.00")
    assert pricing.deposit_amount == Decimal("75.00")
    assert pricing.fitting_amount == Decimal("150.00")
    assert pricing.final_amount == Decimal("75.00")
    assert pricing.estimated_days == 21


def test_tailor_sourced_fabric_uses_yardage_or_minimum():
    pricing = calculate_order_pricing("kente-shirt", FabricChoice.TAILOR_SOURCED, UrgencyLevel.STANDARD)
    # max(30% of 80, 2 yards * 25)
    assert pricing.fabric_cost == Decimal("50.00")
    assert pricing.total_amount == Decimal("130.00")
    assert pricing.deposit_amount == Decimal("32.50")


def test_express_default_surcharge_and_halved_days():
    pricing = calculate_order_pricing("kente-shirt", FabricChoice.CUSTOMER_PROVIDED, UrgencyLevel.EXPRESS)
    assert pricing.urgency_surcharge == Decimal("20.00")
    assert pricing.total_amount == Decimal("100.00")
    assert pricing.estimated_days == 4


def test_express_uses_tailor_rush_fee():
    pricing = calculate_order_pricing(
        "kente-shirt",
        FabricChoice.CUSTOMER_PROVIDED,
        UrgencyLevel.EXPRESS,
        rush_fee_percentage=Decimal("40"),
    )
    assert pricing.urgency_surcharge == Decimal("32.00")
    assert pricing.total_amount == Decimal("112.00")


def test_unknown_garment_rejected():
    with pytest.raises(AppException) as exc:
        calculate_order_pricing("spacesuit", FabricChoice.CUSTOMER_PROVIDED, UrgencyLevel.STANDARD)
    assert exc.value.status_code == 400

    with pytest.raises(AppException):
        estimate_delivery_days("spacesuit", UrgencyLevel.STANDARD)
