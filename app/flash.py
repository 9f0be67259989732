"""
One-shot flash messages carried in a short-lived cookie between a redirect
and the next rendered page.
"""
from __future__ import annotations

import base64
import json
from typing import List, Tuple

from app.security import secure_cookies

FLASH_COOKIE_NAME = "flash"
FLASH_COOKIE_MAX_AGE = 60

Flash = Tuple[str, str]


def _encode(messages: List[Flash]) -> str:
    raw = json.dumps([list(m) for m in messages]).encode("utf-8")
    # unpadded so the value needs no cookie quoting
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _decode(value: str) -> List[Flash]:
    try:
        padded = value + "=" * (-len(value) % 4)
        data = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (ValueError, UnicodeError):
        return []
    if not isinstance(data, list):
        return []
    return [
        (str(item[0]), str(item[1]))
        for item in data
        if isinstance(item, list) and len(item) == 2
    ]


def flash(response, category: str, message: str) -> None:
    """Queue a message for the next rendered page, replacing any unread one."""
    response.set_cookie(
        key=FLASH_COOKIE_NAME,
        value=_encode([(category, message)]),
        httponly=True,
        max_age=FLASH_COOKIE_MAX_AGE,
        samesite="lax",
        secure=secure_cookies(),
    )


def read_flashes(request) -> List[Flash]:
    cookies = getattr(request, "cookies", None) or {}
    value = cookies.get(FLASH_COOKIE_NAME)
    if not value:
        return []
    return _decode(value)


def clear_flashes(response) -> None:
    response.delete_cookie(FLASH_COOKIE_NAME)


__all__ = ["FLASH_COOKIE_NAME", "flash", "read_flashes", "clear_flashes"]
