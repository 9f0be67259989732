"""
Password reset token lifecycle: issue a one-time token, show the reset form
only for live tokens, and consume a token while setting the new password.

The manager owns no state of its own. It coordinates three collaborators:

- a directory (user lookups and the two reset mutations),
- a notifier (sends the reset link),
- a session gate (logs the user in after a successful reset).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

from core.db.users.password_reset import mint_reset_token, now_ms
from core.errors import (
    AccountNotFound,
    CredentialMismatch,
    InvalidOrExpiredToken,
)

log = logging.getLogger("reset")

RESET_TEMPLATE_ID = "password-reset"
RESET_SUBJECT = "Password Reset"


class Directory(Protocol):
    def find_by_email(self, email: str) -> Optional[Dict]:
        ...

    def find_by_live_token(self, token: str, now: int) -> Optional[Dict]:
        ...

    def persist(self, user: Dict) -> None:
        ...

    def update_credential_and_clear_token(self, user: Dict, new_password: str, *, token: str, now: int) -> bool:
        ...


class Notifier(Protocol):
    def send(self, *, template_id: str, user: Dict, subject: str, reset_url: str) -> None:
        ...


class SessionGate(Protocol):
    def establish(self, user: Dict) -> str:
        ...


@dataclass(frozen=True)
class ResetIssued:
    user: Dict
    token: str
    expires_at: int
    reset_url: str


@dataclass(frozen=True)
class ResetConsumed:
    user: Dict
    session_id: str


def build_reset_url(origin: str, token: str) -> str:
    return f"{origin.rstrip('/')}/account/reset/{token}"


def confirmed_passwords(password: str, confirm: str) -> None:
    """Raise CredentialMismatch unless both password fields agree."""
    if password != confirm:
        raise CredentialMismatch()


class ResetTokenManager:
    def __init__(
        self,
        directory: Directory,
        notifier: Notifier,
        session_gate: SessionGate,
        clock: Callable[[], int] = now_ms,
    ):
        self.directory = directory
        self.notifier = notifier
        self.session_gate = session_gate
        self.clock = clock

    def request_reset(self, email: str, origin: str) -> ResetIssued:
        """
        Mint a reset token for the account registered under ``email`` and mail
        the reset link.

        Raises AccountNotFound, StoreError (nothing was sent) or NotifyError
        (the token was saved and stays usable).
        """
        user = self.directory.find_by_email(email)
        if not user:
            log.info("Reset requested for unknown email=%s", email)
            raise AccountNotFound()

        token, expires_at = mint_reset_token(self.clock())
        user["reset_token"] = token
        user["reset_token_expiry"] = expires_at
        self.directory.persist(user)
        log.info("Issued reset token for user_id=%s", user["id"])

        reset_url = build_reset_url(origin, token)
        self.notifier.send(
            template_id=RESET_TEMPLATE_ID,
            user=user,
            subject=RESET_SUBJECT,
            reset_url=reset_url,
        )
        log.info("Sent reset link to user_id=%s", user["id"])
        return ResetIssued(user=user, token=token, expires_at=expires_at, reset_url=reset_url)

    def find_reset_user(self, token: str) -> Dict:
        """Return the user whose reset token is live, for showing the reset form."""
        user = self.directory.find_by_live_token(token, self.clock())
        if not user:
            raise InvalidOrExpiredToken()
        return user

    def consume_reset(self, token: str, new_password: str, confirm_password: str) -> ResetConsumed:
        """
        Set a new password using a live reset token and log the user in.

        The token is cleared in the same update that stores the password, so
        it can be used only once even with concurrent requests.
        """
        confirmed_passwords(new_password, confirm_password)

        now = self.clock()
        user = self.directory.find_by_live_token(token, now)
        if not user:
            raise InvalidOrExpiredToken()

        if not self.directory.update_credential_and_clear_token(user, new_password, token=token, now=now):
            log.info("Reset token for user_id=%s was consumed or expired concurrently", user["id"])
            raise InvalidOrExpiredToken()
        log.info("Password reset completed for user_id=%s", user["id"])

        session_id = self.session_gate.establish(user)
        return ResetConsumed(user=user, session_id=session_id)


__all__ = [
    "Directory",
    "Notifier",
    "SessionGate",
    "ResetIssued",
    "ResetConsumed",
    "ResetTokenManager",
    "RESET_TEMPLATE_ID",
    "RESET_SUBJECT",
    "build_reset_url",
    "confirmed_passwords",
]
