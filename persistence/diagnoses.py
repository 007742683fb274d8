"""
Diagnosis history storage.

Rows are append-only: the analysis proxy inserts one row per completed
analysis and nothing in this service updates them afterwards.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional
from uuid import uuid4

from persistence.db import get_db, init_db

_logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 20


def save_diagnosis(
    image_url: str,
    result: dict,
    user_id: Optional[str] = None,
    symptoms: Optional[str] = None,
    is_fallback: bool = False,
) -> str:
    """
    Save a diagnosis result.

    Args:
        image_url: Public URL of the analysed photo
        result: Full DiagnosisReport dict (camelCase keys)
        user_id: Optional user ID (anonymous analyses are stored too)
        symptoms: Free-text symptoms the owner entered
        is_fallback: True when the report is the fixed fallback report

    Returns:
        Diagnosis ID for retrieval
    """
    init_db()

    diagnosis_id = str(uuid4())
    created_at = datetime.utcnow()

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO pet_diagnoses
            (id, user_id, image_url, symptoms, raw_diagnosis_result,
             health_score, risk_level, is_fallback, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                diagnosis_id,
                user_id,
                image_url,
                symptoms,
                json.dumps(result),
                int(result["healthScore"]),
                result["riskLevel"],
                1 if is_fallback else 0,
                created_at.isoformat(),
            ),
        )

    _logger.debug(f"Saved diagnosis {diagnosis_id} for user {user_id}")
    return diagnosis_id


def get_diagnosis(diagnosis_id: str, user_id: Optional[str] = None) -> Optional[dict]:
    """
    Get a diagnosis by ID.

    When user_id is given, rows owned by other users are treated as missing.
    """
    init_db()

    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM pet_diagnoses WHERE id = ?",
            (diagnosis_id,),
        ).fetchone()

    if row is None:
        return None
    if user_id is not None and row["user_id"] != user_id:
        return None

    return _row_to_dict(row)


def list_diagnoses_for_user(user_id: str, limit: int = DEFAULT_HISTORY_LIMIT) -> list[dict]:
    """List a user's diagnoses, newest first."""
    init_db()

    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM pet_diagnoses
            WHERE user_id = ?
            ORDER BY created_at DESC
            LIMIT ?
            """,
            (user_id, limit),
        ).fetchall()

    return [_row_to_dict(row) for row in rows]


def _row_to_dict(row) -> dict:
    """Convert a row to a HistoryRecord dict (report fields flattened in)."""
    report = json.loads(row["raw_diagnosis_result"])
    return {
        "id": row["id"],
        "userId": row["user_id"],
        "imageUrl": row["image_url"],
        "symptomsText": row["symptoms"] or "",
        "createdAt": row["created_at"],
        "healthScore": row["health_score"],
        "riskLevel": row["risk_level"],
        "diagnosis": report.get("diagnosis", ""),
        "description": report.get("description", ""),
        "diseases": report.get("diseases", []),
        "recommendations": report.get("recommendations", []),
        "medications": report.get("medications", []),
    }
