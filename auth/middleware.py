"""
FastAPI authentication helpers.

Provides:
- Session cookie handling
- Helper dependencies for route handlers
"""

from __future__ import annotations

from typing import Optional
from fastapi import Request, Response, HTTPException

from auth.models import User
from auth.service import get_current_user

# Cookie configuration
SESSION_COOKIE_NAME = "healpet_session"
SESSION_COOKIE_MAX_AGE = 7 * 24 * 60 * 60  # 7 days in seconds


def get_client_ip(request: Request) -> Optional[str]:
    """Client IP for the session audit columns; first X-Forwarded-For hop wins."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_ip = forwarded_for.split(",")[0].strip()
        if first_ip:
            return first_ip
    return request.client.host if request.client else None


def get_session_id(request: Request) -> Optional[str]:
    """Extract session ID from request cookies."""
    return request.cookies.get(SESSION_COOKIE_NAME)


def set_session_cookie(response: Response, session_id: str, secure: bool = False) -> None:
    """Set session cookie on response."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_id,
        max_age=SESSION_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=secure,
    )


def clear_session_cookie(response: Response) -> None:
    """Clear session cookie from response."""
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        httponly=True,
        samesite="lax",
    )


async def get_optional_user(request: Request) -> Optional[User]:
    """
    FastAPI dependency: Get current user if logged in.

    Returns None for anonymous users (no error).
    """
    session_id = get_session_id(request)
    return get_current_user(session_id)


async def get_required_user(request: Request) -> User:
    """
    FastAPI dependency: Get current user (required).

    Raises 401 if not logged in.
    """
    user = await get_optional_user(request)
    if not user:
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
        )
    return user
