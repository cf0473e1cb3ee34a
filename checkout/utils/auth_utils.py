# checkout/utils/auth_utils.py
from fastapi import HTTPException, status, Depends, Request
from jose import JWTError, jwt
from decouple import config

from checkout.models.user import TokenData

# Tokens are issued by the identity provider; this service only verifies them.
SECRET_KEY = config("JWT_SECRET", default="change-me")
ALGORITHM = config("JWT_ALGORITHM", default="HS256")
AUDIENCE = config("JWT_AUDIENCE", default="authenticated")

MANAGER_ROLE = "manager"

def decode_token(token: str) -> TokenData:
    """Validate a bearer token and extract the caller's identity."""
    credentials_error = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM], audience=AUDIENCE)
    except JWTError:
        raise credentials_error

    user_id = payload.get("sub")
    if user_id is None:
        raise credentials_error

    app_metadata = payload.get("app_metadata") or {}
    return TokenData(user_id=user_id, email=payload.get("email"), role=app_metadata.get("role"))

async def get_current_user(request: Request) -> TokenData:
    """Extract JWT token from Authorization header and validate user."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = auth_header.split(" ", 1)[1]  # Extract token after "Bearer"
    return decode_token(token)

def manager_required(user: TokenData = Depends(get_current_user)) -> TokenData:
    if user.role != MANAGER_ROLE:
        raise HTTPException(status_code=403, detail="Only event managers can perform this action")
    return user
