import html

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from app.auth_utils import get_current_user, login_required_redirect
from app.flash import read_flashes
from app.layout import render_page

router = APIRouter()


@router.get("/account", response_class=HTMLResponse)
def account(request: Request):
    user, _ = get_current_user(request)
    if not user:
        return login_required_redirect()

    body = f"""
    <div class="card">
      <h2>Your account</h2>
      <p>Email: <strong>{html.escape(user["email"])}</strong></p>
      <p class="muted">Member since {html.escape(user.get("created_at") or "")}</p>
      <p class="muted">Forgot your password later? Log out and use the reset form on the login page.</p>
    </div>
    """
    return render_page("Account", body, user=user, flashes=read_flashes(request))
