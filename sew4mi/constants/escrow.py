from decimal import Decimal


DEPOSIT_PERCENTAGE = Decimal("0.25")
FITTING_PERCENTAGE = Decimal("0.50")
FINAL_PERCENTAGE = Decimal("0.25")
