"""
Error kinds raised by the password reset flow.

Every error carries a default user-facing message; routes turn them into a
flash message plus a redirect.
"""
from __future__ import annotations


class PasswordResetError(Exception):
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class AccountNotFound(PasswordResetError):
    default_message = "No account with that email exists."


class InvalidOrExpiredToken(PasswordResetError):
    default_message = "Password reset is invalid or has expired"


class CredentialMismatch(PasswordResetError):
    default_message = "Passwords do not match"


class StoreError(PasswordResetError):
    """User store I/O failure."""

    default_message = "Unable to update your account right now. Please try again."


class NotifyError(PasswordResetError):
    """Email delivery failure."""

    default_message = "Unable to send the password reset email."


class SessionError(PasswordResetError):
    """Could not establish a login session."""

    default_message = "Your password was changed but we could not log you in. Please log in."


__all__ = [
    "PasswordResetError",
    "AccountNotFound",
    "InvalidOrExpiredToken",
    "CredentialMismatch",
    "StoreError",
    "NotifyError",
    "SessionError",
]
