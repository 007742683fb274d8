# auth/service.py
"""
Account and session operations against the SQLite store.

Sign-up enforces the password rule and unique (case-insensitive) email.
Sessions are looked up by cookie value; expired ones are deleted the
first time they are seen.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from auth.models import SESSION_DURATION_DAYS, Session, User
from auth.password import hash_password, is_password_strong, verify_password
from persistence.db import get_db, init_db

_logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class AuthError(Exception):
    """Base authentication error."""


class UserExistsError(AuthError):
    """Email is already registered."""


class WeakPasswordError(AuthError):
    """Password is shorter than the minimum length."""


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password. The message never says which."""


def _fetch_one(sql: str, params: tuple):
    init_db()
    with get_db() as conn:
        return conn.execute(sql, params).fetchone()


def create_user(email: str, password: str) -> User:
    """
    Register a new account.

    Raises:
        WeakPasswordError: If the password is too short
        UserExistsError: If the email is already registered
    """
    ok, reason = is_password_strong(password)
    if not ok:
        raise WeakPasswordError(reason)

    if get_user_by_email(email):
        raise UserExistsError("This email is already registered")

    user = User.new(email=email, password_hash=hash_password(password))

    with get_db() as conn:
        conn.execute(
            "INSERT INTO users (id, email, password_hash, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?)",
            user.to_row(),
        )

    _logger.info(f"New account: {user.email}")
    return user


def get_user_by_email(email: str) -> Optional[User]:
    row = _fetch_one("SELECT * FROM users WHERE email = ?", (email.lower().strip(),))
    return User.from_row(row) if row else None


def get_user_by_id(user_id: str) -> Optional[User]:
    row = _fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))
    return User.from_row(row) if row else None


def authenticate_user(email: str, password: str) -> User:
    """
    Check an email/password pair.

    Raises:
        InvalidCredentialsError: If the account is unknown or the password is wrong
    """
    user = get_user_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        _logger.warning(f"Failed login for {email.lower().strip()}")
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

    _logger.info(f"Login: {user.email}")
    return user


def create_session(
    user_id: str,
    duration_days: int = SESSION_DURATION_DAYS,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Session:
    """Start a login session; its id becomes the cookie value."""
    init_db()
    session = Session.new(
        user_id=user_id,
        duration_days=duration_days,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    with get_db() as conn:
        conn.execute(
            "INSERT INTO sessions (id, user_id, created_at, expires_at, ip_address, user_agent) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            session.to_row(),
        )

    _logger.debug(f"Session started for user {user_id}")
    return session


def get_session(session_id: str) -> Optional[Session]:
    """Live session for a cookie value. Expired sessions are deleted and yield None."""
    row = _fetch_one("SELECT * FROM sessions WHERE id = ?", (session_id,))
    if not row:
        return None

    session = Session.from_row(row)
    if not session.is_valid:
        invalidate_session(session_id)
        return None
    return session


def invalidate_session(session_id: str) -> bool:
    """Delete a session. Returns False if it did not exist."""
    init_db()
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
        return cursor.rowcount > 0


def get_current_user(session_id: Optional[str]) -> Optional[User]:
    """Account behind a session cookie, or None for anonymous requests."""
    if not session_id:
        return None

    session = get_session(session_id)
    if session is None:
        return None
    return get_user_by_id(session.user_id)


def cleanup_expired_sessions() -> int:
    init_db()
    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM sessions WHERE expires_at < ?",
            (datetime.utcnow().isoformat(),),
        )
        count = cursor.rowcount

    if count:
        _logger.info(f"Removed {count} expired sessions")
    return count
