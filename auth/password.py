# auth/password.py
"""
bcrypt password hashes and the sign-up password rule.

HEALPET_BCRYPT_ROUNDS lowers the work factor for tests.
"""

from __future__ import annotations

import logging
import os

import bcrypt

_logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = int(os.environ.get("HEALPET_BCRYPT_ROUNDS", "12"))

MIN_PASSWORD_LENGTH = 6

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def _to_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def hash_password(password: str) -> str:
    """
    Salted bcrypt hash of a password.

    Raises:
        ValueError: If the password is empty
    """
    if not password:
        raise ValueError("Password cannot be empty")

    hashed = bcrypt.hashpw(_to_bytes(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """True if the password matches; malformed hashes count as a mismatch."""
    if not password or not password_hash:
        return False

    try:
        return bcrypt.checkpw(_to_bytes(password), password_hash.encode("utf-8"))
    except ValueError as e:
        _logger.warning(f"Unreadable password hash: {e}")
        return False


def is_password_strong(password: str) -> tuple[bool, str]:
    """Returns (ok, reason). Only a minimum length is enforced."""
    if not password:
        return False, "Password cannot be empty"

    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters"

    return True, ""
