"""
Helpers for session cookies, current-user lookup and the login gate.
"""
from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import RedirectResponse, Response

from app.flash import flash
from app.security import secure_cookies
from core.database import (
    DB_ERRORS,
    create_session,
    delete_session,
    get_session,
    get_user_by_id,
    touch_session,
)
from core.errors import SessionError

log = logging.getLogger("auth")

SESSION_COOKIE_NAME = "session_id"
SESSION_COOKIE_MAX_AGE = 1800  # 30 minutes


def get_current_user(request: Request):
    """
    Read session cookie and return (user_dict, session_token) or (None, None).
    Refreshes inactivity timeout when the session is valid.
    """
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        return None, None

    session = get_session(token)
    if not session:
        return None, token

    user = get_user_by_id(session["user_id"])
    if not user:
        delete_session(token)
        return None, token

    touch_session(token)
    return user, token


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        max_age=SESSION_COOKIE_MAX_AGE,
        samesite="lax",
        secure=secure_cookies(),
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME)


def login_required_redirect() -> RedirectResponse:
    """Redirect to the login page with the 'must be logged in' flash."""
    response = RedirectResponse(url="/login", status_code=303)
    flash(response, "error", "Oops! You must be logged in to do that!")
    return response


class DbSessionGate:
    """Starts a stored login session for a user and hands back the session id."""

    def establish(self, user: dict) -> str:
        try:
            token = create_session(user["id"])
        except DB_ERRORS as exc:
            log.exception("Could not create session for user_id=%s", user.get("id"))
            raise SessionError() from exc
        log.info("Session established for user_id=%s", user["id"])
        return token


__all__ = [
    "SESSION_COOKIE_NAME",
    "DbSessionGate",
    "clear_session_cookie",
    "get_current_user",
    "login_required_redirect",
    "set_session_cookie",
]
