"""
User directory backed by the SQL users table.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional

from core import database
from core.errors import StoreError

log = logging.getLogger("db")


class UserDirectory:
    """Lookups and mutations the reset flow needs; driver errors become StoreError."""

    def find_by_email(self, email: str) -> Optional[Dict]:
        try:
            return database.get_user_by_email(email)
        except database.DB_ERRORS as exc:
            log.exception("User lookup by email failed")
            raise StoreError() from exc

    def find_by_live_token(self, token: str, now: int) -> Optional[Dict]:
        try:
            return database.get_user_by_live_reset_token(token, now)
        except database.DB_ERRORS as exc:
            log.exception("User lookup by reset token failed")
            raise StoreError() from exc

    def persist(self, user: Dict) -> None:
        """Write the user's reset_token and reset_token_expiry together."""
        try:
            database.save_reset_token(
                user["id"], user.get("reset_token"), user.get("reset_token_expiry")
            )
        except database.DB_ERRORS as exc:
            log.exception("Saving reset token failed for user_id=%s", user.get("id"))
            raise StoreError() from exc

    def update_credential_and_clear_token(self, user: Dict, new_password: str, *, token: str, now: int) -> bool:
        try:
            updated = database.update_password_and_clear_reset_token(user["id"], new_password, token, now)
        except database.DB_ERRORS as exc:
            log.exception("Password update failed for user_id=%s", user.get("id"))
            raise StoreError() from exc
        if updated:
            user["reset_token"] = None
            user["reset_token_expiry"] = None
        return updated


__all__ = ["UserDirectory"]
