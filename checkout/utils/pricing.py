# checkout/utils/pricing.py
from typing import Optional

from checkout.models.discount import Discount, FixedAmountDiscount, PercentDiscount
from checkout.models.payment import PaymentSummary


def summarize(
    unit_price: float,
    quantity: int,
    discount: Optional[Discount] = None,
    fees: float = 0,
) -> PaymentSummary:
    """
    Calculate the payment summary for ``quantity`` items at ``unit_price``.

    All amounts must already be in the display currency. The discount is
    capped at the subtotal so it never eats into the fees.
    """
    if unit_price < 0 or fees < 0:
        raise ValueError("unit_price and fees must not be negative")
    if quantity < 0:
        raise ValueError("quantity must not be negative")

    subtotal = unit_price * quantity

    if isinstance(discount, PercentDiscount):
        discount_value = subtotal * (discount.value / 100)
    elif isinstance(discount, FixedAmountDiscount):
        discount_value = discount.value
    else:
        discount_value = 0.0

    discount_value = min(discount_value, subtotal)  # Avoid over-discounting

    return PaymentSummary(
        subtotal=subtotal,
        discount_value=discount_value,
        fees=fees,
        total=subtotal - discount_value + fees,
    )
