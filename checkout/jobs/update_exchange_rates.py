# checkout/jobs/update_exchange_rates.py
"""
Scheduled exchange rate refresh.

Run from cron, e.g. every two weeks:

    python -m checkout.jobs.update_exchange_rates
"""
import asyncio
import logging
import sys

from decouple import config

from checkout.database import database
from checkout.utils.rates import NoCurrenciesError, refresh_exchange_rates

logger = logging.getLogger(__name__)


async def run(db=database) -> int:
    try:
        result = await refresh_exchange_rates(db)
    except NoCurrenciesError:
        logger.error("No currencies found, nothing to refresh")
        return 1
    logger.info(f"Updated currencies: {', '.join(result.updated_currencies) or 'none'}")
    return 0


def main() -> int:
    logging.basicConfig(
        level=config("LOG_LEVEL", default="INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run())


if __name__ == "__main__":
    sys.exit(main())
