# checkout/routes/currencies.py
from fastapi import APIRouter, HTTPException, Depends, Response

from checkout.database import get_database
from checkout.models.currency import (
    ConversionRequest,
    ConversionResult,
    CurrencyChoice,
    CurrencySelection,
)
from checkout.models.session import CheckoutSession
from checkout.utils.currency import (
    convert_between,
    find_currency,
    format_currency,
    list_active_currencies,
    select_default_currency,
)
from checkout.utils.session import get_checkout_session, remember_currency

router = APIRouter()


@router.get("", response_model=CurrencyChoice)
async def get_currencies(
    db=Depends(get_database),
    session: CheckoutSession = Depends(get_checkout_session),
):
    """Active currencies plus the one to preselect for this visitor."""
    listing = await list_active_currencies(db)
    selected = select_default_currency(listing.currencies, session.selected_currency)
    return CurrencyChoice(currencies=listing.currencies, selected=selected, warning=listing.warning)


@router.put("/selected", response_model=CurrencyChoice)
async def select_currency(
    selection: CurrencySelection,
    response: Response,
    db=Depends(get_database),
    session: CheckoutSession = Depends(get_checkout_session),
):
    listing = await list_active_currencies(db)
    currency = find_currency(listing.currencies, selection.code)
    if not currency:
        raise HTTPException(status_code=400, detail=f"Currency {selection.code} is not available.")

    remember_currency(response, session, currency.code)
    return CurrencyChoice(currencies=listing.currencies, selected=currency, warning=listing.warning)


@router.post("/convert", response_model=ConversionResult)
async def convert(request: ConversionRequest, db=Depends(get_database)):
    listing = await list_active_currencies(db)
    converted = convert_between(request.amount, request.from_code, request.to_code, listing.currencies)
    return ConversionResult(
        amount=request.amount,
        from_code=request.from_code.upper(),
        to_code=request.to_code.upper(),
        converted=converted,
        formatted=format_currency(converted, request.to_code, listing.currencies),
    )
