from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from app.auth_utils import get_current_user
from app.flash import read_flashes
from app.layout import render_page

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def home(request: Request):
    user, _ = get_current_user(request)
    if user:
        body = """
        <div class="card">
          <p>Welcome back. Manage your details on the <a href="/account">account page</a>.</p>
        </div>
        """
    else:
        body = """
        <div class="card">
          <p>Please <a href="/login">log in</a> to continue.</p>
          <p class="muted">Forgot your password? Request a reset link from the login page.</p>
        </div>
        """
    return render_page("Home", body, user=user, flashes=read_flashes(request))


@router.get("/health")
def health():
    return {"status": "ok"}
