# app/routers/history.py
"""
Diagnosis history for the logged-in user.

Records are returned newest first. A record owned by another user is
reported as not found.
"""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from app.correlation import get_request_id
from auth.middleware import get_required_user
from auth.models import User
from persistence.diagnoses import DEFAULT_HISTORY_LIMIT, get_diagnosis, list_diagnoses_for_user

router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("")
async def get_history(
    raw_request: Request,
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=100),
    user: User = Depends(get_required_user),
):
    """
    Response:
        {"request_id": ..., "items": [HistoryRecord, ...], "count": N}
    """
    items = list_diagnoses_for_user(user.id, limit=limit)
    return {
        "request_id": get_request_id(raw_request) or "unknown",
        "items": items,
        "count": len(items),
    }


@router.get("/{record_id}")
async def get_history_item(
    record_id: str,
    raw_request: Request,
    user: User = Depends(get_required_user),
):
    request_id = get_request_id(raw_request) or "unknown"

    item = get_diagnosis(record_id, user_id=user.id)
    if not item:
        return JSONResponse(
            status_code=404,
            content={
                "request_id": request_id,
                "error": "not_found",
                "detail": f"History item {record_id} not found",
            },
        )

    return {"request_id": request_id, "item": item}
