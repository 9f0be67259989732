"""
Login session storage. The session id doubles as the cookie value.
"""
from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from typing import Dict, Optional

from core.db.base import get_conn

SESSION_TIMEOUT_MINUTES = 30  # inactivity timeout


def _iso(moment: datetime) -> str:
    return moment.isoformat(timespec="seconds")


def _expiry(now: datetime) -> str:
    return _iso(now + timedelta(minutes=SESSION_TIMEOUT_MINUTES))


def _write(sql: str, params) -> None:
    conn = get_conn()
    try:
        cur = conn.cursor()
        cur.execute(sql, params)
        conn.commit()
    finally:
        conn.close()


def create_session(user_id: int) -> str:
    """Create a new login session for the given user_id and return the session token."""
    token = secrets.token_urlsafe(32)
    now = datetime.utcnow()
    _write(
        """
        INSERT INTO sessions (id, user_id, created_at, last_seen_at, expires_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (token, user_id, _iso(now), _iso(now), _expiry(now)),
    )
    return token


def delete_session(session_id: str) -> None:
    """Remove a session from the DB (logout)."""
    if not session_id:
        return
    _write("DELETE FROM sessions WHERE id = ?", (session_id,))


def get_session(session_id: str) -> Optional[Dict]:
    """
    Look up a live session by id. Expired or unreadable sessions are removed
    and reported as missing.
    """
    if not session_id:
        return None

    conn = get_conn()
    try:
        cur = conn.cursor()
        cur.execute(
            "SELECT id, user_id, created_at, last_seen_at, expires_at FROM sessions WHERE id = ?",
            (session_id,),
        )
        row = cur.fetchone()
    finally:
        conn.close()
    if not row:
        return None

    try:
        expired = datetime.fromisoformat(row["expires_at"]) < datetime.utcnow()
    except (TypeError, ValueError):
        expired = True
    if expired:
        delete_session(session_id)
        return None
    return dict(row)


def touch_session(session_id: str) -> None:
    """Slide a session's expiry forward from now."""
    if not session_id:
        return

    now = datetime.utcnow()
    _write(
        "UPDATE sessions SET last_seen_at = ?, expires_at = ? WHERE id = ?",
        (_iso(now), _expiry(now), session_id),
    )


__all__ = [
    "SESSION_TIMEOUT_MINUTES",
    "create_session",
    "delete_session",
    "get_session",
    "touch_session",
]
