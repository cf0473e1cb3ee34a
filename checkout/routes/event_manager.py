# checkout/routes/event_manager.py
import logging
import uuid
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, HTTPException, Depends
from pymongo import ReturnDocument

from checkout.database import DISCOUNT_CODES, get_database
from checkout.models.currency import RateRefreshResult
from checkout.models.discount import DiscountCode, DiscountCodeCreate, DiscountCodeUpdate
from checkout.models.user import TokenData
from checkout.utils.auth_utils import manager_required
from checkout.utils.rates import NoCurrenciesError, refresh_exchange_rates

logger = logging.getLogger(__name__)

router = APIRouter()

def discount_fields(payload: DiscountCodeCreate) -> dict:
    """Map the form's type/value pair onto the stored percent/amount columns."""
    if payload.discount_type == "percent":
        return {"discount_percent": payload.discount_value, "discount_amount": None}
    return {"discount_amount": payload.discount_value, "discount_percent": None}


@router.post("/discount-codes", response_model=DiscountCode)
async def create_discount_code(
    payload: DiscountCodeCreate,
    db=Depends(get_database),
    user: TokenData = Depends(manager_required),
):
    """Create a new discount code for an event."""
    existing = await db[DISCOUNT_CODES].find_one({"code": payload.code, "event_id": payload.event_id})
    if existing:
        raise HTTPException(status_code=400, detail="Discount code already exists for this event.")

    now = datetime.now(timezone.utc)
    code_data = {
        "id": str(uuid.uuid4()),
        "event_id": payload.event_id,
        "code": payload.code,
        "valid_from": now,
        "valid_until": payload.valid_until,
        "max_uses": payload.max_uses,
        "current_uses": 0,
        "is_active": payload.is_active,
        "created_by": user.user_id,  # Store which manager created it
        "created_at": now,
        "updated_at": now,
        **discount_fields(payload),
    }
    await db[DISCOUNT_CODES].insert_one(code_data)
    logger.info(f"Manager {user.user_id} created discount code {payload.code!r} for event {payload.event_id}")

    return DiscountCode(**code_data)


@router.get("/discount-codes", response_model=List[DiscountCode])
async def get_discount_codes(db=Depends(get_database), user: TokenData = Depends(manager_required)):
    """Retrieve all discount codes created by the logged-in manager, newest first."""
    codes = await db[DISCOUNT_CODES].find({"created_by": user.user_id}).sort("created_at", -1).to_list(length=None)
    return [DiscountCode(**code) for code in codes]


@router.put("/discount-codes/{code_id}", response_model=DiscountCode)
async def update_discount_code(
    code_id: str,
    payload: DiscountCodeUpdate,
    db=Depends(get_database),
    user: TokenData = Depends(manager_required),
):
    clash = await db[DISCOUNT_CODES].find_one({
        "code": payload.code,
        "event_id": payload.event_id,
        "id": {"$ne": code_id},
    })
    if clash:
        raise HTTPException(status_code=400, detail="Discount code already exists for this event.")

    update_fields = {
        "code": payload.code,
        "event_id": payload.event_id,
        "is_active": payload.is_active,
        "updated_at": datetime.now(timezone.utc),
        **discount_fields(payload),
    }
    if payload.valid_until:
        update_fields["valid_until"] = payload.valid_until
    if payload.max_uses:
        update_fields["max_uses"] = payload.max_uses

    updated = await db[DISCOUNT_CODES].find_one_and_update(
        {"id": code_id, "created_by": user.user_id},
        {"$set": update_fields},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Discount code not found")
    return DiscountCode(**updated)


@router.delete("/discount-codes/{code_id}")
async def delete_discount_code(code_id: str, db=Depends(get_database), user: TokenData = Depends(manager_required)):
    result = await db[DISCOUNT_CODES].delete_one({"id": code_id, "created_by": user.user_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Discount code not found")
    return {"status": "deleted", "id": code_id}


@router.post("/exchange-rates/refresh", response_model=RateRefreshResult)
async def refresh_rates(db=Depends(get_database), user: TokenData = Depends(manager_required)):
    """Run the exchange rate refresh on demand."""
    try:
        return await refresh_exchange_rates(db)
    except NoCurrenciesError:
        raise HTTPException(status_code=404, detail="No currencies found")
