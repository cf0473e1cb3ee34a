# checkout/models/currency.py
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Optional

class Currency(BaseModel):
    id: Optional[str] = None
    code: str
    name: str
    symbol: str
    exchange_rate: Optional[float] = None  # relative to the base currency
    is_active: bool = True
    updated_at: Optional[datetime] = None

class CurrencyListing(BaseModel):
    currencies: List[Currency] = []
    warning: Optional[str] = None

class CurrencySelection(BaseModel):
    code: str

    @field_validator('code')
    def normalize_code(cls, v):
        v = v.strip().upper()
        if not v:
            raise ValueError("code must not be empty")
        return v

class CurrencyChoice(BaseModel):
    currencies: List[Currency]
    selected: Optional[Currency] = None
    warning: Optional[str] = None

class ConversionRequest(BaseModel):
    amount: float
    from_code: str
    to_code: str

class ConversionResult(BaseModel):
    amount: float
    from_code: str
    to_code: str
    converted: float
    formatted: str

class RateRefreshResult(BaseModel):
    source: str  # "api" or "fallback"
    updated_currencies: List[str] = Field(default_factory=list)
    skipped_currencies: List[str] = Field(default_factory=list)
