# auth/__init__.py
"""
Pet owner accounts.

Email/password sign-up and login backed by the SQLite store, bcrypt
password hashes, and cookie sessions that expire after seven days.
"""

from auth.models import User, Session
from auth.service import (
    AuthError,
    InvalidCredentialsError,
    UserExistsError,
    WeakPasswordError,
    authenticate_user,
    cleanup_expired_sessions,
    create_session,
    create_user,
    get_current_user,
    get_user_by_email,
    invalidate_session,
)

__all__ = [
    "User",
    "Session",
    "AuthError",
    "InvalidCredentialsError",
    "UserExistsError",
    "WeakPasswordError",
    "authenticate_user",
    "cleanup_expired_sessions",
    "create_session",
    "create_user",
    "get_current_user",
    "get_user_by_email",
    "invalidate_session",
]
