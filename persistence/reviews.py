"""
Review / testimonial storage.

Submitted reviews start unapproved and only show up in the public feed
after an admin approves them.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional
from uuid import uuid4

from persistence.db import get_db, init_db

_logger = logging.getLogger(__name__)

DEFAULT_AVATAR_URL = "/imgs/pet_avatar_1_8.png"
DEFAULT_PET_TYPE = "Pet"
DEFAULT_PET_NAME = "Buddy"


def save_review(
    user_id: str,
    user_name: str,
    content: str,
    rating: int,
    pet_type: Optional[str] = None,
    pet_name: Optional[str] = None,
    avatar_url: str = DEFAULT_AVATAR_URL,
) -> str:
    """
    Store a pending review.

    Returns:
        Review ID
    """
    init_db()

    review_id = str(uuid4())
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO pet_reviews
            (id, user_id, user_name, pet_type, pet_name, content, rating,
             avatar_url, approved, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, ?)
            """,
            (
                review_id,
                user_id,
                user_name,
                pet_type or DEFAULT_PET_TYPE,
                pet_name or DEFAULT_PET_NAME,
                content,
                rating,
                avatar_url,
                datetime.utcnow().isoformat(),
            ),
        )

    _logger.info(f"Review {review_id} submitted by user {user_id}")
    return review_id


def get_review(review_id: str) -> Optional[dict]:
    """Get a review by ID, approved or not."""
    init_db()

    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM pet_reviews WHERE id = ?",
            (review_id,),
        ).fetchone()

    return _row_to_dict(row) if row else None


def list_approved_reviews(limit: int = 20) -> list[dict]:
    """Approved reviews, newest first."""
    init_db()

    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM pet_reviews
            WHERE approved = 1
            ORDER BY created_at DESC
            LIMIT ?
            """,
            (limit,),
        ).fetchall()

    return [_row_to_dict(row) for row in rows]


def approve_review(review_id: str) -> bool:
    """
    Mark a review as approved.

    Returns:
        True if updated, False if not found
    """
    init_db()

    with get_db() as conn:
        cursor = conn.execute(
            "UPDATE pet_reviews SET approved = 1 WHERE id = ?",
            (review_id,),
        )
        return cursor.rowcount > 0


def _row_to_dict(row) -> dict:
    return {
        "id": row["id"],
        "user_id": row["user_id"],
        "user_name": row["user_name"],
        "pet_type": row["pet_type"],
        "pet_name": row["pet_name"],
        "content": row["content"],
        "rating": row["rating"],
        "avatar_url": row["avatar_url"],
        "approved": bool(row["approved"]),
        "created_at": row["created_at"],
    }
