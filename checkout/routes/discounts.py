# checkout/routes/discounts.py
from fastapi import APIRouter, Depends

from checkout.database import get_database
from checkout.models.discount import DiscountVerification, RedemptionResult, VerifyRequest
from checkout.utils.discounts import redeem_discount_code, verify_discount_code

router = APIRouter()


@router.post("/verify", response_model=DiscountVerification)
async def verify_code(request: VerifyRequest, db=Depends(get_database)):
    # Invalid codes are a normal answer, not an error
    return await verify_discount_code(db, request.code, request.event_id)


@router.post("/{code_id}/redeem", response_model=RedemptionResult)
async def redeem_code(code_id: str, db=Depends(get_database)):
    """Count one use of a discount code at checkout. A used-up code answers success=False."""
    success = await redeem_discount_code(db, code_id)
    return RedemptionResult(code_id=code_id, success=success)
