# app/routers/admin.py
"""
Admin dashboard endpoints.

Every route requires the X-Admin-Password header to match
HEALPET_ADMIN_PASSWORD. With no password configured the dashboard is
disabled and every route answers 503.
"""

import logging
import os
import secrets

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from persistence.reviews import approve_review
from persistence.stats import get_dashboard_stats, get_recent_activity, list_users_with_usage
from persistence.vault import delete_secret, put_secret

_logger = logging.getLogger(__name__)

ADMIN_PASSWORD_ENV = "HEALPET_ADMIN_PASSWORD"


async def require_admin(x_admin_password: str = Header(default="")) -> None:
    """FastAPI dependency guarding the admin routes."""
    expected = os.environ.get(ADMIN_PASSWORD_ENV)
    if not expected:
        raise HTTPException(status_code=503, detail="Admin dashboard is not configured")
    if not secrets.compare_digest(x_admin_password.encode("utf-8"), expected.encode("utf-8")):
        _logger.warning("Rejected admin request with bad password")
        raise HTTPException(status_code=401, detail="Invalid admin password")


router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


class SecretRequest(BaseModel):
    secret: str = Field(..., min_length=1)


@router.get("/stats")
async def stats():
    return get_dashboard_stats()


@router.get("/activity")
async def activity(limit: int = Query(20, ge=1, le=200)):
    """Recent signups, diagnoses and checkouts, newest first."""
    items = get_recent_activity(limit=limit)
    return {"items": items, "count": len(items)}


@router.get("/users")
async def users(limit: int = Query(100, ge=1, le=1000)):
    items = list_users_with_usage(limit=limit)
    return {"users": items, "count": len(items)}


@router.post("/reviews/{review_id}/approve")
async def approve(review_id: str):
    if not approve_review(review_id):
        return JSONResponse(
            status_code=404,
            content={"error": "not_found", "detail": f"Review {review_id} not found"},
        )
    _logger.info(f"Review {review_id} approved")
    return {"success": True, "id": review_id}


@router.put("/secrets/{name}")
async def store_secret(name: str, request: SecretRequest):
    """Store a provider credential in the vault (e.g. CREEM_API_KEY)."""
    put_secret(name, request.secret)
    return {"success": True, "name": name}


@router.delete("/secrets/{name}")
async def remove_secret(name: str):
    if not delete_secret(name):
        return JSONResponse(
            status_code=404,
            content={"error": "not_found", "detail": f"Secret {name} not found"},
        )
    return {"success": True, "name": name}
