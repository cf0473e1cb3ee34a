# checkout/utils/session.py
from typing import Optional

from fastapi import Cookie, Response

from checkout.models.session import SELECTED_CURRENCY_COOKIE, CheckoutSession

# One year; the selection should survive between visits
COOKIE_MAX_AGE = 60 * 60 * 24 * 365


def get_checkout_session(
    selected_currency: Optional[str] = Cookie(default=None, alias=SELECTED_CURRENCY_COOKIE),
) -> CheckoutSession:
    """FastAPI dependency building the checkout session from the request cookie."""
    code = selected_currency.strip().upper() if selected_currency else None
    return CheckoutSession(selected_currency=code or None)


def remember_currency(response: Response, session: CheckoutSession, code: str) -> CheckoutSession:
    session.selected_currency = code
    response.set_cookie(
        SELECTED_CURRENCY_COOKIE,
        code,
        max_age=COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
    )
    return session
