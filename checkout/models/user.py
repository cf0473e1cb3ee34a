# checkout/models/user.py
from pydantic import BaseModel
from typing import Optional

class TokenData(BaseModel):
    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None
