"""
Password hashing and verification (bcrypt).
"""
from __future__ import annotations

import bcrypt

BCRYPT_MAX_BYTES = 72


def _password_bytes(raw_password: str) -> bytes:
    # bcrypt only reads the first 72 bytes; newer releases reject longer input
    return raw_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(raw_password: str) -> str:
    return bcrypt.hashpw(_password_bytes(raw_password), bcrypt.gensalt()).decode("utf-8")


def verify_password(raw_password: str, password_hash: str | None) -> bool:
    if not (raw_password and password_hash):
        return False
    try:
        return bcrypt.checkpw(_password_bytes(raw_password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the store
        return False


__all__ = ["hash_password", "verify_password"]
