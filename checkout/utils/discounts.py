# checkout/utils/discounts.py
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from checkout.database import DISCOUNT_CODES
from checkout.models.discount import (
    DiscountVerification,
    FixedAmountDiscount,
    NoDiscount,
    PercentDiscount,
)

logger = logging.getLogger(__name__)


def ensure_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def check_code_window(doc: dict, now: datetime) -> Optional[str]:
    """Return the reason a stored code cannot be used right now, or None."""
    valid_from = doc.get("valid_from")
    if valid_from and now < ensure_utc(valid_from):
        return "not_started"

    valid_until = doc.get("valid_until")
    if valid_until and now > ensure_utc(valid_until):
        return "expired"

    max_uses = doc.get("max_uses")
    if max_uses and doc.get("current_uses", 0) >= max_uses:
        return "exhausted"

    return None


async def verify_discount_code(
    db,
    code: str,
    event_id: str,
    now: Optional[datetime] = None,
) -> DiscountVerification:
    """
    Check a discount code for an event.

    Unknown, inactive, out-of-window and used-up codes come back as
    ``valid=False`` with a reason; nothing here raises.
    """
    now = ensure_utc(now) if now else datetime.now(timezone.utc)
    code = (code or "").strip()
    if not code:
        return DiscountVerification(valid=False, reason="not_found")

    try:
        doc = await db[DISCOUNT_CODES].find_one(
            {"code": code, "event_id": event_id, "is_active": True}
        )
    except PyMongoError as e:
        logger.error(f"Error verifying discount code {code!r} for event {event_id}: {e}")
        return DiscountVerification(valid=False, reason="error")

    if not doc:
        return DiscountVerification(valid=False, reason="not_found")

    reason = check_code_window(doc, now)
    if reason:
        logger.info(f"Discount code {code!r} rejected for event {event_id}: {reason}")
        return DiscountVerification(valid=False, code_id=doc.get("id"), reason=reason)

    # Zero-valued discounts are treated as absent
    return DiscountVerification(
        valid=True,
        code_id=doc.get("id"),
        discount_percent=doc.get("discount_percent") or None,
        discount_amount=doc.get("discount_amount") or None,
    )


async def redeem_discount_code(db, code_id: str) -> bool:
    """
    Count one use of a discount code.

    The cap is part of the update filter, so the increment and the
    ``current_uses < max_uses`` check happen in one atomic document update.
    Returns False when the code is unknown, inactive or used up.
    """
    collection = db[DISCOUNT_CODES]
    try:
        doc = await collection.find_one({"id": code_id, "is_active": True}, {"max_uses": 1})
        if not doc:
            logger.warning(f"Redemption refused: discount code {code_id} not found or inactive")
            return False

        max_uses = doc.get("max_uses")
        query = {"id": code_id, "is_active": True, "max_uses": max_uses}
        if max_uses:
            query["current_uses"] = {"$lt": max_uses}

        updated = await collection.find_one_and_update(
            query,
            {"$inc": {"current_uses": 1}, "$set": {"updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
    except PyMongoError as e:
        logger.error(f"Error incrementing discount code usage for {code_id}: {e}")
        return False

    if not updated:
        logger.info(f"Redemption refused: discount code {code_id} has reached its usage limit")
        return False

    logger.info(f"Discount code {code_id} redeemed ({updated.get('current_uses')} uses)")
    return True


def discount_from_verification(
    result: DiscountVerification,
    convert_amount: Optional[Callable[[float], float]] = None,
):
    """Resolve a verification into a single discount; percent wins over a fixed amount."""
    if not result.valid:
        return NoDiscount()
    if result.discount_percent:
        return PercentDiscount(value=result.discount_percent)
    if result.discount_amount:
        amount = convert_amount(result.discount_amount) if convert_amount else result.discount_amount
        return FixedAmountDiscount(value=amount)
    return NoDiscount()


class DiscountEntry:
    """Tracks the state of a discount code being entered at checkout."""

    IDLE = "idle"
    CHECKING = "checking"
    VALID = "valid"
    INVALID = "invalid"

    _transitions = {
        IDLE: {CHECKING},
        CHECKING: {VALID, INVALID},
        VALID: {IDLE},
        INVALID: {CHECKING, IDLE},
    }

    def __init__(self):
        self.status = self.IDLE
        self.result: Optional[DiscountVerification] = None

    def _move(self, status: str):
        if status not in self._transitions[self.status]:
            raise ValueError(f"Cannot move discount entry from {self.status} to {status}")
        self.status = status

    def begin_check(self):
        self._move(self.CHECKING)
        self.result = None

    def resolve(self, result: DiscountVerification):
        self._move(self.VALID if result.valid else self.INVALID)
        self.result = result

    def clear(self):
        self._move(self.IDLE)
        self.result = None
