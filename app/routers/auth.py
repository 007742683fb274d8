# app/routers/auth.py
"""
Account endpoints backed by cookie sessions.

POST /api/auth/signup   create account, start session
POST /api/auth/login    start session
POST /api/auth/logout   end session, clear cookie
GET  /api/auth/me       current user (401 when anonymous)
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr

from app.correlation import get_request_id
from auth.middleware import (
    clear_session_cookie,
    get_client_ip,
    get_required_user,
    get_session_id,
    set_session_cookie,
)
from auth.models import User
from auth.service import (
    InvalidCredentialsError,
    UserExistsError,
    WeakPasswordError,
    authenticate_user,
    create_session,
    create_user,
    invalidate_session,
)

_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class SignupRequest(BaseModel):
    email: EmailStr
    password: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


def _start_session(user: User, raw_request: Request, response: Response) -> None:
    session = create_session(
        user_id=user.id,
        ip_address=get_client_ip(raw_request),
        user_agent=raw_request.headers.get("user-agent"),
    )
    set_session_cookie(response, session.id, secure=raw_request.url.scheme == "https")


@router.post("/signup")
async def signup(request: SignupRequest, raw_request: Request, response: Response):
    """Create a new account and log it in."""
    request_id = get_request_id(raw_request) or "unknown"

    try:
        user = create_user(email=request.email, password=request.password)
    except UserExistsError as e:
        return JSONResponse(
            status_code=409,
            content={"request_id": request_id, "error": "user_exists", "detail": str(e)},
        )
    except WeakPasswordError as e:
        return JSONResponse(
            status_code=400,
            content={"request_id": request_id, "error": "weak_password", "detail": str(e)},
        )

    _start_session(user, raw_request, response)

    return {
        "request_id": request_id,
        "success": True,
        "user": user.to_dict(),
    }


@router.post("/login")
async def login(request: LoginRequest, raw_request: Request, response: Response):
    request_id = get_request_id(raw_request) or "unknown"

    try:
        user = authenticate_user(request.email, request.password)
    except InvalidCredentialsError as e:
        _logger.info(f"Failed login for {request.email}", extra={"request_id": request_id})
        return JSONResponse(
            status_code=401,
            content={"request_id": request_id, "error": "invalid_credentials", "detail": str(e)},
        )

    _start_session(user, raw_request, response)

    return {
        "request_id": request_id,
        "success": True,
        "user": user.to_dict(),
    }


@router.post("/logout")
async def logout(raw_request: Request, response: Response):
    """Invalidate the session and clear the cookie."""
    session_id = get_session_id(raw_request)
    if session_id:
        invalidate_session(session_id)

    clear_session_cookie(response)

    return {"success": True, "message": "Logged out successfully"}


@router.get("/me")
async def me(user: User = Depends(get_required_user)):
    return {"user": user.to_dict()}
