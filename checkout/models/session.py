# checkout/models/session.py
from pydantic import BaseModel
from typing import Optional

# Cookie holding the last-selected currency code between visits
SELECTED_CURRENCY_COOKIE = "selected_currency"

class CheckoutSession(BaseModel):
    """Per-request checkout state, rebuilt from the client cookie."""
    selected_currency: Optional[str] = None
