import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from dotenv import load_dotenv

# Load .env before the app modules so their settings see it, even if uvicorn is
# launched without `dotenv run`. override=True so editing `.env` (and restarting
# uvicorn) reliably takes effect.
load_dotenv(override=True)

from app.routes import account, auth, public  # noqa: E402
from app.security import SECURITY_HEADERS  # noqa: E402
from core.database import init_db  # noqa: E402

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("app")


def warn_if_public_url_missing() -> bool:
    """Reset links fall back to the request Host header without PUBLIC_BASE_URL."""
    if os.getenv("PUBLIC_BASE_URL"):
        return False
    log.warning(
        "PUBLIC_BASE_URL is not set; reset links will use the request Host header. "
        "Set it in production."
    )
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    warn_if_public_url_missing()
    yield


app = FastAPI(lifespan=lifespan)


app.include_router(public.router)
app.include_router(auth.router)
app.include_router(account.router)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response
