# checkout/models/discount.py
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from typing import Annotated, Literal, Optional, Union

class DiscountCodeBase(BaseModel):
    code: str
    event_id: str
    discount_type: str  # "percent" or "amount"
    discount_value: float
    valid_until: Optional[datetime] = None
    max_uses: Optional[int] = None
    is_active: bool = True

    @field_validator('code')
    def validate_code(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("code must not be empty")
        return v

    @field_validator('discount_type')
    def validate_discount_type(cls, v):
        if v not in ["percent", "amount"]:
            raise ValueError("discount_type must be either 'percent' or 'amount'")
        return v

    @field_validator('max_uses')
    def validate_max_uses(cls, v):
        if v is not None and v < 1:
            raise ValueError("max_uses must be at least 1")
        return v

    @model_validator(mode='after')
    def validate_discount_value(self):
        if self.discount_value <= 0:
            raise ValueError("discount_value must be positive")
        if self.discount_type == "percent" and self.discount_value > 100:
            raise ValueError("a percent discount cannot exceed 100")
        return self

class DiscountCodeCreate(DiscountCodeBase):
    pass

class DiscountCodeUpdate(DiscountCodeBase):
    pass

class DiscountCode(BaseModel):
    id: str
    event_id: str
    code: str
    discount_percent: Optional[float] = None
    discount_amount: Optional[float] = None
    valid_from: datetime
    valid_until: Optional[datetime] = None
    max_uses: Optional[int] = None
    current_uses: int = 0
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class VerifyRequest(BaseModel):
    code: str
    event_id: str

class DiscountVerification(BaseModel):
    valid: bool
    discount_percent: Optional[float] = None
    discount_amount: Optional[float] = None
    code_id: Optional[str] = None
    reason: Optional[str] = None  # "not_found", "not_started", "expired", "exhausted", "error"

class RedemptionResult(BaseModel):
    code_id: str
    success: bool

# Resolved discount descriptor, tagged on "kind"
class PercentDiscount(BaseModel):
    kind: Literal["percent"] = "percent"
    value: float = Field(ge=0, le=100)

class FixedAmountDiscount(BaseModel):
    kind: Literal["amount"] = "amount"
    value: float = Field(ge=0)

class NoDiscount(BaseModel):
    kind: Literal["none"] = "none"

Discount = Annotated[
    Union[PercentDiscount, FixedAmountDiscount, NoDiscount],
    Field(discriminator="kind"),
]
