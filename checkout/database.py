# checkout/database.py
from motor.motor_asyncio import AsyncIOMotorClient
from decouple import config

MONGO_DETAILS = config("MONGO_URI", default="mongodb://localhost:27017")
DATABASE_NAME = config("MONGO_DATABASE", default="marketplace")

client = AsyncIOMotorClient(MONGO_DETAILS)
database = client[DATABASE_NAME]

# Collection names
CURRENCIES = "currencies"
DISCOUNT_CODES = "discount_codes"
AUTOMATION_LOGS = "automation_logs"


def get_database():
    """FastAPI dependency returning the application database handle."""
    return database
