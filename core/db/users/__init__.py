"""
User-related storage helpers, split by responsibility.
"""
from core.db.users.auth import hash_password, verify_password
from core.db.users.user_store import (
    create_user,
    get_user_by_email,
    get_user_by_id,
    get_user_by_live_reset_token,
    save_reset_token,
    update_password_and_clear_reset_token,
    update_user_password,
)
from core.db.users.password_reset import (
    RESET_TOKEN_BYTES,
    RESET_TOKEN_TTL_MS,
    is_token_live,
    mint_reset_token,
    now_ms,
)
from core.db.users.sessions import (
    create_session,
    delete_session,
    get_session,
    touch_session,
    SESSION_TIMEOUT_MINUTES,
)

__all__ = [
    "hash_password",
    "verify_password",
    "create_user",
    "get_user_by_email",
    "get_user_by_id",
    "get_user_by_live_reset_token",
    "save_reset_token",
    "update_password_and_clear_reset_token",
    "update_user_password",
    "RESET_TOKEN_BYTES",
    "RESET_TOKEN_TTL_MS",
    "is_token_live",
    "mint_reset_token",
    "now_ms",
    "create_session",
    "delete_session",
    "get_session",
    "touch_session",
    "SESSION_TIMEOUT_MINUTES",
]
