# app/routers/checkout.py
"""
Subscription checkout endpoints.

POST /api/checkout
    {product_id, success_url?, customer_email?, metadata?}
    200 {success: true, checkout_url, checkout_id}
    400 {success: false, error} for every failure, including a malformed body
GET /api/plans
    {plans: [...]}
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from app.correlation import get_request_id
from billing import CheckoutError, create_checkout_session, list_plans

_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["billing"])


class CheckoutRequest(BaseModel):
    product_id: Optional[str] = None
    success_url: Optional[str] = None
    customer_email: Optional[str] = None
    metadata: dict = Field(default_factory=dict)


def checkout_error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@router.post("/checkout")
async def create_checkout(raw_request: Request):
    """Create a hosted checkout session and return its redirect URL."""
    request_id = get_request_id(raw_request) or "unknown"

    try:
        request = CheckoutRequest.model_validate(await raw_request.json())
    except (ValueError, ValidationError) as e:
        _logger.warning(f"Invalid checkout body: {e}", extra={"request_id": request_id})
        return checkout_error_response("Invalid request body")

    try:
        result = await create_checkout_session(
            product_id=request.product_id,
            success_url=request.success_url,
            customer_email=request.customer_email,
            metadata=request.metadata,
        )
    except CheckoutError as e:
        _logger.warning(f"Checkout failed: {e}", extra={"request_id": request_id})
        return checkout_error_response(str(e))

    return {
        "success": True,
        "checkout_url": result["checkout_url"],
        "checkout_id": result["checkout_id"],
    }


@router.get("/plans")
async def get_plans():
    """Plans shown on the pricing screen."""
    return {"plans": [plan.to_dict() for plan in list_plans()]}
