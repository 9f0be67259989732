"""
User CRUD plus the reset-token columns on the users table.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from core.db.base import get_conn
from core.db.users.auth import hash_password
from core.db.users.password_reset import is_token_live

_USER_COLUMNS = "id, email, password_hash, created_at, reset_token, reset_token_expiry"


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _fetch_user(sql: str, params) -> Optional[Dict]:
    conn = get_conn()
    try:
        cur = conn.cursor()
        cur.execute(sql, params)
        row = cur.fetchone()
    finally:
        conn.close()
    return dict(row) if row else None


def create_user(email: str, raw_password: str) -> int:
    now = datetime.utcnow().isoformat(timespec="seconds")
    conn = get_conn()
    try:
        cur = conn.cursor()
        cur.execute(
            """
            INSERT INTO users (email, password_hash, created_at)
            VALUES (?, ?, ?)
            RETURNING id
            """,
            (_normalize_email(email), hash_password(raw_password), now),
        )
        row = cur.fetchone()
        conn.commit()
    finally:
        conn.close()
    return int(row["id"]) if row else 0


def get_user_by_email(email: str) -> Dict | None:
    return _fetch_user(f"SELECT {_USER_COLUMNS} FROM users WHERE email = ?", (_normalize_email(email),))


def get_user_by_id(user_id: int) -> Optional[Dict]:
    """Look up a user by numeric id. Returns dict or None."""
    return _fetch_user(f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?", (user_id,))


def get_user_by_live_reset_token(token: str, now: int) -> Optional[Dict]:
    """
    Return the user holding ``token`` if it has not expired at ``now`` (epoch ms).
    Exact match on the token; expiry must be strictly greater than ``now``.
    """
    if not token:
        return None

    user = _fetch_user(
        f"""
        SELECT {_USER_COLUMNS}
        FROM users
        WHERE reset_token = ? AND reset_token_expiry > ?
        """,
        (token, now),
    )
    if not user:
        return None
    if user.get("reset_token") != token or not is_token_live(
        user.get("reset_token"), user.get("reset_token_expiry"), now
    ):
        return None
    return user


def save_reset_token(user_id: int, token: Optional[str], expiry: Optional[int]) -> None:
    """Write both reset columns at once. Passing ``None`` for both clears them."""
    if (token is None) != (expiry is None):
        raise ValueError("reset_token and reset_token_expiry must be set or cleared together")

    conn = get_conn()
    try:
        cur = conn.cursor()
        cur.execute(
            "UPDATE users SET reset_token=?, reset_token_expiry=? WHERE id=?",
            (token, expiry, user_id),
        )
        conn.commit()
    finally:
        conn.close()


def update_password_and_clear_reset_token(user_id: int, raw_password: str, token: str, now: int) -> bool:
    """
    Set a new password and clear the reset columns in one conditional UPDATE.
    Only applies while ``token`` is still the user's live token at ``now``.
    Existing login sessions of the user are dropped in the same transaction.
    Returns False when nothing matched (already consumed, replaced or expired).
    """
    password_hash = hash_password(raw_password)
    conn = get_conn()
    try:
        cur = conn.cursor()
        cur.execute(
            """
            UPDATE users
            SET password_hash=?, reset_token=NULL, reset_token_expiry=NULL
            WHERE id=? AND reset_token=? AND reset_token_expiry > ?
            """,
            (password_hash, user_id, token, now),
        )
        updated = cur.rowcount == 1
        if updated:
            cur.execute("DELETE FROM sessions WHERE user_id=?", (user_id,))
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
    return updated


def update_user_password(user_id: int, raw_password: str) -> None:
    conn = get_conn()
    try:
        cur = conn.cursor()
        cur.execute(
            "UPDATE users SET password_hash=? WHERE id=?",
            (hash_password(raw_password), user_id),
        )
        conn.commit()
    finally:
        conn.close()


__all__ = [
    "create_user",
    "get_user_by_email",
    "get_user_by_id",
    "get_user_by_live_reset_token",
    "save_reset_token",
    "update_password_and_clear_reset_token",
    "update_user_password",
]
