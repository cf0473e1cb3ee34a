# checkout/utils/rates.py
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import requests
from decouple import config
from fastapi.concurrency import run_in_threadpool

from checkout.database import AUTOMATION_LOGS, CURRENCIES
from checkout.models.currency import RateRefreshResult
from checkout.utils.currency import BASE_CURRENCY

logger = logging.getLogger(__name__)

EXCHANGE_RATE_API_URL = config("EXCHANGE_RATE_API_URL", default="https://api.exchangeratesapi.io/latest")
EXCHANGE_RATE_API_KEY = config("EXCHANGE_RATE_API_KEY", default=None)
EXCHANGE_RATE_TIMEOUT = config("EXCHANGE_RATE_TIMEOUT", default=8, cast=int)

JOB_NAME = "update-exchange-rates"

# Used whenever the rate API is unavailable
FALLBACK_RATES: Dict[str, float] = {
    "ETB": 1.0,
    "USD": 0.018,
    "EUR": 0.016,
    "GBP": 0.014,
}


class NoCurrenciesError(LookupError):
    """Raised when there are no currencies to refresh."""


def fetch_exchange_rates(codes: List[str], api_key: Optional[str] = None) -> Tuple[Dict[str, float], str]:
    """
    Fetch rates for ``codes`` relative to the base currency.

    Returns ``(rates, source)`` where source is ``"api"`` or ``"fallback"``.
    Any failure of the third-party API falls back to the hardcoded rates.
    """
    api_key = api_key if api_key is not None else EXCHANGE_RATE_API_KEY
    if not api_key:
        logger.warning("No EXCHANGE_RATE_API_KEY provided, using fallback rates")
        return dict(FALLBACK_RATES), "fallback"

    params = {
        "base": BASE_CURRENCY,
        "symbols": ",".join(codes),
        "access_key": api_key,
    }
    try:
        resp = requests.get(EXCHANGE_RATE_API_URL, params=params, timeout=EXCHANGE_RATE_TIMEOUT)
        resp.raise_for_status()
        data = resp.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"Failed to fetch exchange rates: {e}")
        return dict(FALLBACK_RATES), "fallback"

    if not data.get("success") or not isinstance(data.get("rates"), dict):
        logger.error(f"Exchange rate API returned an error: {data}")
        return dict(FALLBACK_RATES), "fallback"

    return data["rates"], "api"


async def refresh_exchange_rates(db, api_key: Optional[str] = None) -> RateRefreshResult:
    """Overwrite stored exchange rates and record the run in the automation log."""
    docs = await db[CURRENCIES].find({}, {"code": 1}).to_list(length=None)
    codes = [doc["code"] for doc in docs if doc.get("code")]
    if not codes:
        raise NoCurrenciesError("No currencies found")

    rates, source = await run_in_threadpool(fetch_exchange_rates, codes, api_key)

    now = datetime.now(timezone.utc)
    result = RateRefreshResult(source=source)
    for code in codes:
        if code == BASE_CURRENCY:
            rate = 1.0
        else:
            rate = rates.get(code)
        if not rate or rate <= 0:
            result.skipped_currencies.append(code)
            continue
        await db[CURRENCIES].update_one(
            {"code": code},
            {"$set": {"exchange_rate": float(rate), "updated_at": now}},
        )
        result.updated_currencies.append(code)

    await db[AUTOMATION_LOGS].insert_one({
        "function_name": JOB_NAME,
        "results": result.model_dump(),
        "created_at": now,
    })

    logger.info(
        f"Exchange rates refreshed from {source}: "
        f"{len(result.updated_currencies)} updated, {len(result.skipped_currencies)} skipped"
    )
    return result
