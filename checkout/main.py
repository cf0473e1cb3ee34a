# checkout/main.py
import logging

from decouple import config
from fastapi import FastAPI

from checkout.routes import currencies, discounts, event_manager, payments

logging.basicConfig(
    level=config("LOG_LEVEL", default="INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Marketplace Checkout Pricing")

# Include routers with appropriate prefixes
app.include_router(currencies.router, prefix="/currencies", tags=["Currencies"])
app.include_router(discounts.router, prefix="/discounts", tags=["Discounts"])
app.include_router(payments.router, prefix="/payments", tags=["Payments"])
app.include_router(event_manager.router, prefix="/manager", tags=["Event Manager"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
