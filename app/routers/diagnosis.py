# app/routers/diagnosis.py
"""
Pet photo analysis endpoint.

POST /api/diagnosis
    {imageData, fileName, symptoms?, userId?}
    200 {data: {publicUrl, diagnosis, timestamp}}
    500 {error: {code: "DIAGNOSIS_FAILED", message, kind}}

Every failure, including a malformed body, is reported as a 500 with the
DIAGNOSIS_FAILED code. ``kind`` tells the client how to present it.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.correlation import get_request_id
from auth.middleware import get_optional_user
from diagnosis import DiagnosisError, diagnose_pet

_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["diagnosis"])

ERROR_CODE = "DIAGNOSIS_FAILED"


class DiagnosisRequest(BaseModel):
    """Fields are optional here so missing values get the domain error message."""

    model_config = ConfigDict(populate_by_name=True)

    image_data: Optional[str] = Field(default=None, alias="imageData")
    file_name: Optional[str] = Field(default=None, alias="fileName")
    symptoms: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="userId")


def diagnosis_error_response(message: str, kind: str = "unknown", request_id: Optional[str] = None) -> JSONResponse:
    content = {"error": {"code": ERROR_CODE, "message": message, "kind": kind}}
    if request_id:
        content["request_id"] = request_id
    return JSONResponse(status_code=500, content=content)


@router.post("/diagnosis")
async def create_diagnosis(raw_request: Request):
    """Analyze a pet photo."""
    request_id = get_request_id(raw_request)

    try:
        request = DiagnosisRequest.model_validate(await raw_request.json())
    except (ValueError, ValidationError):
        return diagnosis_error_response("Invalid request body", "validation", request_id)

    # A logged-in session takes precedence over a client-supplied userId
    user = await get_optional_user(raw_request)
    user_id = user.id if user else request.user_id

    try:
        outcome = await diagnose_pet(
            image_data=request.image_data,
            file_name=request.file_name,
            symptoms=request.symptoms,
            user_id=user_id,
        )
    except DiagnosisError as e:
        _logger.error(f"Diagnosis error: {e}")
        return diagnosis_error_response(str(e), e.kind, request_id)
    except Exception as e:
        _logger.exception("Unexpected diagnosis failure")
        return diagnosis_error_response(str(e) or "Unknown error occurred", "unknown", request_id)

    return outcome.to_response()
