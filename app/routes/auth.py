import html
import logging
import os

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.auth_utils import (
    DbSessionGate,
    clear_session_cookie,
    get_current_user,
    set_session_cookie,
)
from app.email_utils import SmtpNotifier
from app.flash import flash, read_flashes
from app.layout import render_page
from app.security import (
    attach_csrf_cookie,
    csrf_rejected,
    issue_csrf_token,
    validate_csrf,
)
from core.database import create_session, delete_session, get_user_by_email, verify_password
from core.directory import UserDirectory
from core.errors import (
    AccountNotFound,
    CredentialMismatch,
    InvalidOrExpiredToken,
    NotifyError,
    PasswordResetError,
    SessionError,
)
from core.reset_manager import ResetTokenManager

router = APIRouter()
log = logging.getLogger("auth")

RESET_SENT_MESSAGE = "If that email exists, a password reset link has been sent."


def build_reset_manager() -> ResetTokenManager:
    return ResetTokenManager(UserDirectory(), SmtpNotifier(), DbSessionGate())


def _reveal_unknown_accounts() -> bool:
    return os.getenv("PASSWORD_RESET_REVEAL_UNKNOWN", "").lower() in ("1", "true", "yes")


def _public_origin(request: Request) -> str:
    return (os.getenv("PUBLIC_BASE_URL") or str(request.base_url)).rstrip("/")


def _redirect(url: str, category: str | None = None, message: str | None = None):
    response = RedirectResponse(url=url, status_code=303)
    if message:
        flash(response, category or "info", message)
    return response


@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request):
    user, _ = get_current_user(request)
    csrf_token = issue_csrf_token(request.cookies.get("csrf_token"))
    body = f"""
    <div class="card">
      <h2>Login</h2>
      <form method="post" action="/login">
        <label>Email</label>
        <input type="email" name="email" required maxlength="254" />

        <label>Password</label>
        <input type="password" name="password" required maxlength="72" />

        <input type="hidden" name="csrf_token" value="{csrf_token}" />
        <button type="submit">Log In</button>
      </form>
    </div>
    <div class="card">
      <h2>I forgot my password!</h2>
      <form method="post" action="/account/forgot">
        <label>Email</label>
        <input type="email" name="email" required maxlength="254" />
        <input type="hidden" name="csrf_token" value="{csrf_token}" />
        <button type="submit">Send a Reset</button>
      </form>
    </div>
    """
    resp = render_page("Login", body, user=user, flashes=read_flashes(request))
    attach_csrf_cookie(resp, csrf_token)
    return resp


@router.post("/login")
def login(
    request: Request,
    email: str = Form(..., max_length=254),
    password: str = Form(..., max_length=72),
    csrf_token: str = Form(""),
):
    if not validate_csrf(request, csrf_token):
        return csrf_rejected()

    user = get_user_by_email(email)
    if not user or not verify_password(password, user["password_hash"]):
        log.info("Failed login for email=%s", email)
        return _redirect("/login", "error", "Failed login!")

    token = create_session(user["id"])
    log.info("User logged in user_id=%s", user["id"])
    response = _redirect("/", "success", "You are now logged in!")
    set_session_cookie(response, token)
    return response


@router.get("/logout")
def logout(request: Request):
    _, token = get_current_user(request)
    if token:
        delete_session(token)
    response = _redirect("/", "success", "You are now logged out!")
    clear_session_cookie(response)
    return response


@router.post("/account/forgot")
def forgot(request: Request, email: str = Form(..., max_length=254), csrf_token: str = Form("")):
    if not validate_csrf(request, csrf_token):
        return csrf_rejected()

    reveal = _reveal_unknown_accounts()
    try:
        build_reset_manager().request_reset(email, _public_origin(request))
    except AccountNotFound as exc:
        if reveal:
            return _redirect("/login", "error", exc.message)
        return _redirect("/login", "success", RESET_SENT_MESSAGE)
    except NotifyError as exc:
        # The token was saved; the user can request again later.
        log.warning("Reset email not delivered for email=%s", email)
        if reveal:
            return _redirect("/login", "error", exc.message)
        return _redirect("/login", "success", RESET_SENT_MESSAGE)
    except PasswordResetError as exc:
        return _redirect("/login", "error", exc.message)

    if reveal:
        return _redirect("/login", "success", "You have been emailed a password reset link.")
    return _redirect("/login", "success", RESET_SENT_MESSAGE)


@router.get("/account/reset/{token}", response_class=HTMLResponse)
def reset(request: Request, token: str):
    try:
        build_reset_manager().find_reset_user(token)
    except PasswordResetError as exc:
        return _redirect("/login", "error", exc.message)

    csrf_token = issue_csrf_token(request.cookies.get("csrf_token"))
    safe_token = html.escape(token, quote=True)
    body = f"""
    <div class="card">
      <form method="post" action="/account/reset/{safe_token}">
        <label>Password</label>
        <input type="password" name="password" required maxlength="72" />
        <label>Confirm Password</label>
        <input type="password" name="password-confirm" required maxlength="72" />
        <input type="hidden" name="csrf_token" value="{csrf_token}" />
        <button type="submit">Reset Password</button>
      </form>
    </div>
    """
    resp = render_page("Reset your Password", body, user=None, flashes=read_flashes(request))
    attach_csrf_cookie(resp, csrf_token)
    return resp


@router.post("/account/reset/{token}")
def update(
    request: Request,
    token: str,
    password: str = Form(..., max_length=72),
    password_confirm: str = Form(..., alias="password-confirm", max_length=72),
    csrf_token: str = Form(""),
):
    if not validate_csrf(request, csrf_token):
        return csrf_rejected()

    try:
        result = build_reset_manager().consume_reset(token, password, password_confirm)
    except CredentialMismatch as exc:
        return _redirect(f"/account/reset/{token}", "error", exc.message)
    except InvalidOrExpiredToken as exc:
        return _redirect("/login", "error", exc.message)
    except SessionError as exc:
        return _redirect("/login", "error", exc.message)
    except PasswordResetError as exc:
        return _redirect(f"/account/reset/{token}", "error", exc.message)

    response = _redirect("/", "success", "Nice! Your password has been reset! You are now logged in!")
    set_session_cookie(response, result.session_id)
    return response
