"""
Single import point for storage helpers used by the web app and scripts.
"""
from core.db.base import DB_ERRORS, get_conn
from core.db.schema import init_db
from core.db.users import (
    RESET_TOKEN_TTL_MS,
    SESSION_TIMEOUT_MINUTES,
    create_session,
    create_user,
    delete_session,
    get_session,
    get_user_by_email,
    get_user_by_id,
    get_user_by_live_reset_token,
    hash_password,
    is_token_live,
    mint_reset_token,
    now_ms,
    save_reset_token,
    touch_session,
    update_password_and_clear_reset_token,
    update_user_password,
    verify_password,
)

__all__ = [
    "DB_ERRORS",
    "get_conn",
    "init_db",
    "RESET_TOKEN_TTL_MS",
    "SESSION_TIMEOUT_MINUTES",
    "create_session",
    "create_user",
    "delete_session",
    "get_session",
    "get_user_by_email",
    "get_user_by_id",
    "get_user_by_live_reset_token",
    "hash_password",
    "is_token_live",
    "mint_reset_token",
    "now_ms",
    "save_reset_token",
    "touch_session",
    "update_password_and_clear_reset_token",
    "update_user_password",
    "verify_password",
]
