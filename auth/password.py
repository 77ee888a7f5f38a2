"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.

Accounts created before the switch to bcrypt store an unsalted
base64 SHA-256 digest.  Those still verify, and ``needs_rehash``
tells the login path to replace them with a bcrypt hash.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from typing import Optional

import bcrypt

from config.settings import config

_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
MAX_PASSWORD_BYTES = 72  # bcrypt ignores/rejects anything longer


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt (auto-salted)."""
    raw = password.encode("utf-8")
    if len(raw) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=rounds or config.bcrypt_rounds)
    return bcrypt.hashpw(raw, salt).decode()


def legacy_digest(password: str) -> str:
    """Unsalted base64 SHA-256 digest used by pre-bcrypt accounts."""
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest()).decode()


def is_bcrypt_hash(password_hash: str) -> bool:
    return password_hash.startswith(_BCRYPT_PREFIXES)


def needs_rehash(password_hash: str) -> bool:
    return bool(password_hash) and not is_bcrypt_hash(password_hash)


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a bcrypt hash or a legacy digest."""
    if not password_hash:
        return False
    if is_bcrypt_hash(password_hash):
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode())
        except (ValueError, TypeError):
            return False
    return hmac.compare_digest(legacy_digest(password), password_hash)
