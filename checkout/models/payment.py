# checkout/models/payment.py
from pydantic import BaseModel, Field
from typing import Dict, Optional

from checkout.models.currency import Currency
from checkout.models.discount import Discount, NoDiscount

class PaymentSummary(BaseModel):
    subtotal: float
    discount_value: float
    fees: float
    total: float

class SummaryRequest(BaseModel):
    event_id: str
    unit_price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    price_currency: Optional[str] = None  # defaults to the base currency
    currency: Optional[str] = None        # overrides the session selection
    discount_code: Optional[str] = None
    fees: float = Field(default=0, ge=0)

class PaymentQuote(BaseModel):
    currency: Optional[Currency] = None
    summary: PaymentSummary
    discount: Discount = Field(default_factory=NoDiscount)
    discount_status: str = "idle"
    discount_code_id: Optional[str] = None
    formatted: Dict[str, str] = {}
    warning: Optional[str] = None
