import pytest
from datetime import datetime

from conftest import auth_header, make_code


async def test_get_currencies_defaults_to_base(client, seeded_db):
    response = await client.get("/currencies")

    assert response.status_code == 200
    body = response.json()
    assert [c["code"] for c in body["currencies"]] == ["ETB", "EUR", "USD"]
    assert body["selected"]["code"] == "ETB"
    assert body["warning"] is None


async def test_get_currencies_uses_remembered_selection(client, seeded_db):
    client.cookies.set("selected_currency", "usd")

    response = await client.get("/currencies")

    assert response.json()["selected"]["code"] == "USD"


async def test_select_currency_sets_cookie(client, seeded_db):
    response = await client.put("/currencies/selected", json={"code": "eur"})

    assert response.status_code == 200
    assert response.json()["selected"]["code"] == "EUR"
    assert "selected_currency=EUR" in response.headers["set-cookie"]


async def test_select_inactive_currency_rejected(client, seeded_db):
    response = await client.put("/currencies/selected", json={"code": "JPY"})
    assert response.status_code == 400


async def test_convert_endpoint(client, seeded_db):
    response = await client.post("/currencies/convert", json={"amount": 1000, "from_code": "ETB", "to_code": "USD"})

    body = response.json()
    assert body["converted"] == pytest.approx(18.0)
    assert body["formatted"] == "$ 18.00"


async def test_verify_endpoint(client, db):
    await db.discount_codes.insert_one(make_code(max_uses=5, current_uses=5))

    response = await client.post("/discounts/verify", json={"code": "SAVE10", "event_id": "event-1"})

    assert response.status_code == 200
    assert response.json()["valid"] is False
    assert response.json()["reason"] == "exhausted"


async def test_redeem_endpoint(client, db):
    await db.discount_codes.insert_one(make_code(max_uses=1))

    first = await client.post("/discounts/code-1/redeem")
    second = await client.post("/discounts/code-1/redeem")

    assert first.status_code == 200
    assert first.json() == {"code_id": "code-1", "success": True}
    assert second.status_code == 200
    assert second.json() == {"code_id": "code-1", "success": False}

    doc = await db.discount_codes.find_one({"id": "code-1"})
    assert doc["current_uses"] == 1


async def test_payment_summary_in_selected_currency(client, seeded_db):
    await seeded_db.discount_codes.insert_one(make_code())
    client.cookies.set("selected_currency", "USD")

    response = await client.post("/payments/summary", json={
        "event_id": "event-1",
        "unit_price": 1000,
        "quantity": 2,
        "discount_code": "SAVE10",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["currency"]["code"] == "USD"
    assert body["summary"]["subtotal"] == pytest.approx(36.0)
    assert body["summary"]["discount_value"] == pytest.approx(3.6)
    assert body["summary"]["total"] == pytest.approx(32.4)
    assert body["discount"] == {"kind": "percent", "value": 10}
    assert body["discount_status"] == "valid"
    assert body["discount_code_id"] == "code-1"
    assert body["formatted"]["total"] == "$ 32.40"


async def test_payment_summary_converts_fixed_discount(client, seeded_db):
    await seeded_db.discount_codes.insert_one(make_code(discount_percent=None, discount_amount=100))

    response = await client.post("/payments/summary", json={
        "event_id": "event-1",
        "unit_price": 500,
        "quantity": 1,
        "currency": "USD",
        "discount_code": "SAVE10",
        "fees": 50,
    })

    body = response.json()
    assert body["discount"]["kind"] == "amount"
    assert body["discount"]["value"] == pytest.approx(1.8)
    assert body["summary"]["subtotal"] == pytest.approx(9.0)
    assert body["summary"]["fees"] == pytest.approx(0.9)
    assert body["summary"]["total"] == pytest.approx(9.0 - 1.8 + 0.9)


async def test_payment_summary_with_invalid_code(client, seeded_db):
    await seeded_db.discount_codes.insert_one(make_code(valid_until=datetime(2024, 1, 1)))

    response = await client.post("/payments/summary", json={
        "event_id": "event-1",
        "unit_price": 100,
        "quantity": 1,
        "discount_code": "SAVE10",
    })

    body = response.json()
    assert body["discount_status"] == "invalid"
    assert body["discount"] == {"kind": "none"}
    assert body["summary"]["total"] == pytest.approx(100)
    assert body["formatted"]["discount_label"] == "Invalid or expired discount code."


async def test_payment_summary_without_currencies_stays_in_base(client, db):
    response = await client.post("/payments/summary", json={"event_id": "event-1", "unit_price": 120, "quantity": 2})

    body = response.json()
    assert body["currency"] is None
    assert body["discount_status"] == "idle"
    assert body["summary"]["total"] == pytest.approx(240)
    assert body["formatted"]["total"] == "240.00"


async def test_manager_routes_require_token_and_role(client):
    assert (await client.get("/manager/discount-codes")).status_code == 401

    bad = await client.get("/manager/discount-codes", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401

    customer = await client.get("/manager/discount-codes", headers=auth_header("user-9", role="customer"))
    assert customer.status_code == 403


async def test_manager_discount_code_lifecycle(client, db):
    headers = auth_header()
    payload = {
        "code": "EARLY",
        "event_id": "event-1",
        "discount_type": "percent",
        "discount_value": 20,
        "max_uses": 10,
    }

    created = await client.post("/manager/discount-codes", json=payload, headers=headers)
    assert created.status_code == 200
    code = created.json()
    assert code["discount_percent"] == 20
    assert code["discount_amount"] is None
    assert code["current_uses"] == 0

    duplicate = await client.post("/manager/discount-codes", json=payload, headers=headers)
    assert duplicate.status_code == 400

    listed = await client.get("/manager/discount-codes", headers=headers)
    assert [c["code"] for c in listed.json()] == ["EARLY"]

    # switching to a fixed amount clears the percent
    updated = await client.put(
        f"/manager/discount-codes/{code['id']}",
        json={**payload, "discount_type": "amount", "discount_value": 150},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["discount_amount"] == 150
    assert updated.json()["discount_percent"] is None

    verified = await client.post("/discounts/verify", json={"code": "EARLY", "event_id": "event-1"})
    assert verified.json()["discount_amount"] == 150

    # other managers cannot touch it
    other = auth_header("manager-2")
    assert (await client.delete(f"/manager/discount-codes/{code['id']}", headers=other)).status_code == 404

    deleted = await client.delete(f"/manager/discount-codes/{code['id']}", headers=headers)
    assert deleted.status_code == 200
    assert await db.discount_codes.count_documents({}) == 0


async def test_manager_create_rejects_bad_percent(client):
    response = await client.post(
        "/manager/discount-codes",
        json={"code": "TOO-MUCH", "event_id": "event-1", "discount_type": "percent", "discount_value": 120},
        headers=auth_header(),
    )
    assert response.status_code == 422


async def test_manager_refresh_rates(client, seeded_db, monkeypatch):
    monkeypatch.setattr("checkout.utils.rates.EXCHANGE_RATE_API_KEY", None)

    response = await client.post("/manager/exchange-rates/refresh", headers=auth_header())

    assert response.status_code == 200
    assert response.json()["source"] == "fallback"


async def test_manager_refresh_without_currencies(client, monkeypatch):
    monkeypatch.setattr("checkout.utils.rates.EXCHANGE_RATE_API_KEY", None)

    response = await client.post("/manager/exchange-rates/refresh", headers=auth_header())
    assert response.status_code == 404


async def test_payment_summary_with_null_rate_currency(client, seeded_db):
    await seeded_db.currencies.insert_one(
        {"id": "cur-gbp", "code": "GBP", "name": "Pound", "symbol": "£", "exchange_rate": None, "is_active": True}
    )

    response = await client.post("/payments/summary", json={
        "event_id": "event-1",
        "unit_price": 100,
        "quantity": 2,
        "currency": "GBP",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["currency"]["code"] == "GBP"
    assert body["summary"]["total"] == pytest.approx(200)

    listed = await client.get("/currencies")
    assert listed.status_code == 200
    assert "GBP" in [c["code"] for c in listed.json()["currencies"]]


async def test_payment_summary_unknown_currency_falls_back_to_remembered(client, seeded_db):
    client.cookies.set("selected_currency", "EUR")

    response = await client.post("/payments/summary", json={
        "event_id": "event-1",
        "unit_price": 1000,
        "quantity": 1,
        "currency": "JPY",  # inactive
    })

    body = response.json()
    assert body["currency"]["code"] == "EUR"
    assert body["summary"]["total"] == pytest.approx(16.0)
