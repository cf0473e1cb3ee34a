import pytest
from datetime import datetime, timezone
from httpx import ASGITransport, AsyncClient
from jose import jwt
from mongomock_motor import AsyncMongoMockClient

from checkout.database import get_database
from checkout.main import app
from checkout.utils.auth_utils import ALGORITHM, AUDIENCE, SECRET_KEY


@pytest.fixture
def db():
    return AsyncMongoMockClient()["checkout_test"]


@pytest.fixture
async def seeded_db(db):
    await db.currencies.insert_many([
        {"id": "cur-usd", "code": "USD", "name": "US Dollar", "symbol": "$", "exchange_rate": 0.018, "is_active": True},
        {"id": "cur-etb", "code": "ETB", "name": "Ethiopian Birr", "symbol": "Br", "exchange_rate": 1.0, "is_active": True},
        {"id": "cur-eur", "code": "EUR", "name": "Euro", "symbol": "€", "exchange_rate": 0.016, "is_active": True},
        {"id": "cur-jpy", "code": "JPY", "name": "Yen", "symbol": "¥", "exchange_rate": 2.6, "is_active": False},
    ])
    return db


@pytest.fixture
async def client(db):
    app.dependency_overrides[get_database] = lambda: db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def make_code(**overrides):
    """A stored discount code document, valid since 2020 with no limits."""
    doc = {
        "id": "code-1",
        "event_id": "event-1",
        "code": "SAVE10",
        "discount_percent": 10,
        "discount_amount": None,
        "valid_from": datetime(2020, 1, 1, tzinfo=timezone.utc),
        "valid_until": None,
        "max_uses": None,
        "current_uses": 0,
        "is_active": True,
        "created_by": "manager-1",
    }
    doc.update(overrides)
    return doc


def auth_header(user_id="manager-1", role="manager"):
    claims = {"sub": user_id, "aud": AUDIENCE, "app_metadata": {"role": role}}
    token = jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)
    return {"Authorization": f"Bearer {token}"}
