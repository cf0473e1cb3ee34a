# checkout/routes/payments.py
from fastapi import APIRouter, Depends

from checkout.database import get_database
from checkout.models.discount import FixedAmountDiscount, NoDiscount
from checkout.models.payment import PaymentQuote, SummaryRequest
from checkout.models.session import CheckoutSession
from checkout.utils.currency import (
    BASE_CURRENCY,
    convert_between,
    find_currency,
    format_currency,
    list_active_currencies,
    select_default_currency,
)
from checkout.utils.discounts import DiscountEntry, discount_from_verification, verify_discount_code
from checkout.utils.pricing import summarize
from checkout.utils.session import get_checkout_session

router = APIRouter()


@router.post("/summary", response_model=PaymentQuote)
async def payment_summary(
    request: SummaryRequest,
    db=Depends(get_database),
    session: CheckoutSession = Depends(get_checkout_session),
):
    # 1. Work out the display currency
    listing = await list_active_currencies(db)
    currencies = listing.currencies
    # Requested code first, then the remembered one, then the default
    selected = find_currency(currencies, request.currency) or select_default_currency(
        currencies, session.selected_currency
    )
    display_code = selected.code if selected else BASE_CURRENCY
    price_code = request.price_currency or BASE_CURRENCY

    # 2. Convert the event price and fees into it
    unit_price = convert_between(request.unit_price, price_code, display_code, currencies)
    fees = convert_between(request.fees, price_code, display_code, currencies)

    # 3. Resolve the discount code, if any; fixed amounts are stored in the base currency
    entry = DiscountEntry()
    discount = NoDiscount()
    if request.discount_code and request.discount_code.strip():
        entry.begin_check()
        result = await verify_discount_code(db, request.discount_code, request.event_id)
        entry.resolve(result)
        discount = discount_from_verification(
            result,
            convert_amount=lambda amount: convert_between(amount, BASE_CURRENCY, display_code, currencies),
        )

    # 4. Summarize
    summary = summarize(unit_price, request.quantity, discount, fees)

    formatted = {
        "subtotal": format_currency(summary.subtotal, display_code, currencies),
        "total": format_currency(summary.total, display_code, currencies),
    }
    if summary.discount_value > 0:
        formatted["discount"] = "-" + format_currency(summary.discount_value, display_code, currencies)
    if summary.fees > 0:
        formatted["fees"] = format_currency(summary.fees, display_code, currencies)
    if isinstance(discount, FixedAmountDiscount):
        formatted["discount_label"] = f"Discount: {format_currency(discount.value, display_code, currencies)} off"
    elif entry.status == DiscountEntry.VALID and discount.kind == "percent":
        formatted["discount_label"] = f"Discount: {discount.value:g}% off"
    elif entry.status == DiscountEntry.INVALID:
        formatted["discount_label"] = "Invalid or expired discount code."

    return PaymentQuote(
        currency=selected,
        summary=summary,
        discount=discount,
        discount_status=entry.status,
        discount_code_id=entry.result.code_id if entry.status == DiscountEntry.VALID else None,
        formatted=formatted,
        warning=listing.warning,
    )
