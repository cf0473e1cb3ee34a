# checkout/utils/currency.py
import logging
from typing import List, Optional

from decouple import config
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from checkout.database import CURRENCIES
from checkout.models.currency import Currency, CurrencyListing

logger = logging.getLogger(__name__)

BASE_CURRENCY = config("BASE_CURRENCY", default="ETB")


def convert_currency(amount: float, from_rate: Optional[float], to_rate: Optional[float]) -> float:
    """
    Convert an amount priced at ``from_rate`` into a currency priced at ``to_rate``.

    Both rates are relative to the base currency. A missing or non-positive
    rate leaves the amount unconverted.
    """
    if not from_rate or not to_rate or from_rate < 0 or to_rate < 0:
        if from_rate is not None and to_rate is not None:
            logger.warning(
                f"Unusable exchange rate (from={from_rate}, to={to_rate}); amount {amount} left unconverted"
            )
        return amount
    return (amount / from_rate) * to_rate


def find_currency(currencies: List[Currency], code: Optional[str]) -> Optional[Currency]:
    if not code:
        return None
    code = code.upper()
    return next((c for c in currencies if c.code == code), None)


def rate_for(currencies: List[Currency], code: Optional[str]) -> Optional[float]:
    currency = find_currency(currencies, code)
    return currency.exchange_rate if currency else None


def convert_between(amount: float, from_code: str, to_code: str, currencies: List[Currency]) -> float:
    if from_code.upper() == to_code.upper():
        return amount
    return convert_currency(amount, rate_for(currencies, from_code), rate_for(currencies, to_code))


def format_currency(amount: float, code: Optional[str], currencies: List[Currency]) -> str:
    currency = find_currency(currencies, code)
    if not currency:
        return f"{amount:.2f}"
    return f"{currency.symbol} {amount:.2f}"


async def list_active_currencies(db) -> CurrencyListing:
    """Load active currencies ordered by code. Backend errors yield an empty listing with a warning."""
    try:
        docs = await db[CURRENCIES].find({"is_active": True}).sort("code", 1).to_list(length=None)
    except PyMongoError as e:
        logger.error(f"Error fetching currencies: {e}")
        return CurrencyListing(
            warning=f"Currencies could not be loaded. Prices are shown in {BASE_CURRENCY}."
        )

    currencies, skipped = [], []
    for doc in docs:
        try:
            currencies.append(Currency(**doc))
        except ValidationError as e:
            skipped.append(str(doc.get("code") or doc.get("_id")))
            logger.error(f"Skipping malformed currency row {skipped[-1]}: {e}")

    warning = None
    if skipped:
        warning = f"Some currencies are unavailable: {', '.join(skipped)}."
    return CurrencyListing(currencies=currencies, warning=warning)


def select_default_currency(
    currencies: List[Currency],
    remembered_code: Optional[str] = None,
    base_code: str = BASE_CURRENCY,
) -> Optional[Currency]:
    """Remembered code first, then the base currency, then the first in the list."""
    if not currencies:
        return None
    return (
        find_currency(currencies, remembered_code)
        or find_currency(currencies, base_code)
        or currencies[0]
    )
