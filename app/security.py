"""
CSRF helpers (double-submit cookie) and response security headers.
"""
from __future__ import annotations

import hmac
import os
import secrets

from fastapi.responses import HTMLResponse

CSRF_COOKIE_NAME = "csrf_token"


def secure_cookies() -> bool:
    """Cookies get the Secure flag when COOKIE_SECURE is set or the public URL is https."""
    return (
        os.getenv("COOKIE_SECURE", "").lower() in ("1", "true", "yes")
        or os.getenv("PUBLIC_BASE_URL", "").lower().startswith("https://")
    )


SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": (
        "default-src 'self'; img-src 'self' data:; style-src 'self' 'unsafe-inline'; "
        "form-action 'self';"
    ),
}


def issue_csrf_token(existing: str | None = None) -> str:
    """Return a CSRF token (re-use existing if provided, else create a new one)."""
    return existing or secrets.token_urlsafe(16)


def attach_csrf_cookie(response, token: str) -> None:
    """
    Attach the CSRF token as a non-HTTPOnly cookie (double-submit pattern).
    """
    response.set_cookie(
        key=CSRF_COOKIE_NAME,
        value=token,
        httponly=False,
        samesite="lax",
        secure=secure_cookies(),
    )


def validate_csrf(request, form_token: str | None) -> bool:
    """Compare the submitted token with the cookie value using constant-time compare."""
    cookie_token = request.cookies.get(CSRF_COOKIE_NAME) or ""
    form_token = form_token or ""
    if not cookie_token or not form_token:
        return False
    return hmac.compare_digest(cookie_token, form_token)


def csrf_rejected() -> HTMLResponse:
    return HTMLResponse("Invalid or missing CSRF token.", status_code=403)


__all__ = [
    "CSRF_COOKIE_NAME",
    "SECURITY_HEADERS",
    "secure_cookies",
    "issue_csrf_token",
    "attach_csrf_cookie",
    "validate_csrf",
    "csrf_rejected",
]
