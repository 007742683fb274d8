# app/routers/reviews.py
"""
Pet owner reviews.

Anyone can read approved reviews. Logged-in users can submit one; it
stays hidden until an admin approves it.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator

from auth.middleware import get_required_user
from auth.models import User
from persistence.reviews import get_review, list_approved_reviews, save_review

_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


class ReviewRequest(BaseModel):
    content: str = Field(..., max_length=2000)
    rating: int = Field(5, ge=1, le=5)
    pet_type: Optional[str] = Field(default=None, max_length=50)
    pet_name: Optional[str] = Field(default=None, max_length=50)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("content is required")
        return value


@router.get("")
async def get_reviews(limit: int = Query(20, ge=1, le=100)):
    """Approved reviews, newest first."""
    reviews = list_approved_reviews(limit=limit)
    return {"reviews": reviews, "count": len(reviews)}


@router.post("", status_code=201)
async def submit_review(request: ReviewRequest, user: User = Depends(get_required_user)):
    review_id = save_review(
        user_id=user.id,
        user_name=user.display_name,
        content=request.content,
        rating=request.rating,
        pet_type=request.pet_type,
        pet_name=request.pet_name,
    )
    return {
        "success": True,
        "review": get_review(review_id),
        "message": "Thanks! Your review will appear once approved.",
    }
