"""
Schema helpers for the users and sessions tables.
"""
from __future__ import annotations

import logging
import os

from core.db.base import get_conn
from core.db.users import create_user, get_user_by_email

log = logging.getLogger("db")


def _id_column(dialect: str) -> str:
    if dialect == "sqlite":
        return "id INTEGER PRIMARY KEY AUTOINCREMENT"
    return "id SERIAL PRIMARY KEY"


def init_db() -> None:
    """Create the users and sessions tables if they don't exist."""
    conn = get_conn()
    cur = conn.cursor()

    cur.execute(
        f"""
        CREATE TABLE IF NOT EXISTS users(
            {_id_column(conn.dialect)},
            email TEXT NOT NULL UNIQUE,
            password_hash TEXT NOT NULL,
            created_at TEXT,
            reset_token TEXT,
            reset_token_expiry BIGINT
        )
        """
    )
    cur.execute(
        "CREATE INDEX IF NOT EXISTS idx_users_reset_token ON users(reset_token)"
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS sessions(
            id TEXT PRIMARY KEY,
            user_id INTEGER NOT NULL,
            created_at TEXT,
            last_seen_at TEXT,
            expires_at TEXT,
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
        )
        """
    )
    conn.commit()
    conn.close()

    seed_default_user()


def seed_default_user() -> None:
    """Create the account named by SEED_USER_EMAIL/SEED_USER_PASSWORD if it is missing."""
    email = os.getenv("SEED_USER_EMAIL")
    password = os.getenv("SEED_USER_PASSWORD")
    if not (email and password):
        return
    if get_user_by_email(email):
        return
    user_id = create_user(email, password)
    log.info("Seeded default user id=%s email=%s", user_id, email)


__all__ = ["init_db", "seed_default_user"]
