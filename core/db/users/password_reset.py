"""
Password reset token minting and liveness rules.

A reset token lives on the user row as two columns, ``reset_token`` and
``reset_token_expiry`` (epoch milliseconds). Both are set together and
cleared together.
"""
from __future__ import annotations

import secrets
import time
from typing import Optional, Tuple

RESET_TOKEN_BYTES = 20  # 160 bits
RESET_TOKEN_TTL_MS = 60 * 60 * 1000  # 1 hour


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def mint_reset_token(now: int) -> Tuple[str, int]:
    """Return a fresh ``(token, expiry_ms)`` pair for a reset started at ``now``."""
    token = secrets.token_hex(RESET_TOKEN_BYTES)
    return token, now + RESET_TOKEN_TTL_MS


def is_token_live(reset_token: Optional[str], reset_token_expiry: Optional[int], now: int) -> bool:
    """
    A token is live while it is present and its expiry is strictly after ``now``.
    A token expiring exactly at ``now`` is already expired.
    """
    if not reset_token or reset_token_expiry is None:
        return False
    return int(reset_token_expiry) > now


__all__ = [
    "RESET_TOKEN_BYTES",
    "RESET_TOKEN_TTL_MS",
    "now_ms",
    "mint_reset_token",
    "is_token_live",
]
