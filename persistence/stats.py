"""
Aggregate statistics for the admin dashboard.

All "today" figures use the UTC calendar day, matching the UTC ISO
timestamps stored in every table.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from persistence.db import get_db, init_db


def _today_prefix(now: Optional[datetime] = None) -> str:
    return (now or datetime.utcnow()).date().isoformat()


def get_dashboard_stats(now: Optional[datetime] = None) -> dict:
    """
    Calculate dashboard statistics.

    Returns:
        {
            total_users, new_users_today,
            total_diagnoses, diagnoses_today, fallback_diagnoses,
            average_health_score, risk_levels: {low, medium, high},
            checkout_sessions,
            total_reviews, pending_reviews, average_rating
        }
    """
    init_db()
    today = _today_prefix(now) + "%"

    with get_db() as conn:
        users = conn.execute(
            """
            SELECT COUNT(*) AS total,
                   SUM(CASE WHEN created_at LIKE ? THEN 1 ELSE 0 END) AS today
            FROM users
            """,
            (today,),
        ).fetchone()

        diagnoses = conn.execute(
            """
            SELECT COUNT(*) AS total,
                   SUM(CASE WHEN created_at LIKE ? THEN 1 ELSE 0 END) AS today,
                   SUM(is_fallback) AS fallback,
                   AVG(health_score) AS avg_score
            FROM pet_diagnoses
            """,
            (today,),
        ).fetchone()

        risk_rows = conn.execute(
            "SELECT risk_level, COUNT(*) AS n FROM pet_diagnoses GROUP BY risk_level"
        ).fetchall()

        checkouts = conn.execute(
            "SELECT COUNT(*) AS n FROM checkout_sessions"
        ).fetchone()

        reviews = conn.execute(
            """
            SELECT COUNT(*) AS total,
                   SUM(CASE WHEN approved = 0 THEN 1 ELSE 0 END) AS pending,
                   AVG(rating) AS avg_rating
            FROM pet_reviews
            """
        ).fetchone()

    risk_levels = {"low": 0, "medium": 0, "high": 0}
    for row in risk_rows:
        risk_levels[row["risk_level"]] = row["n"]

    avg_score = diagnoses["avg_score"]
    avg_rating = reviews["avg_rating"]

    return {
        "total_users": users["total"],
        "new_users_today": users["today"] or 0,
        "total_diagnoses": diagnoses["total"],
        "diagnoses_today": diagnoses["today"] or 0,
        "fallback_diagnoses": diagnoses["fallback"] or 0,
        "average_health_score": round(avg_score, 1) if avg_score is not None else None,
        "risk_levels": risk_levels,
        "checkout_sessions": checkouts["n"],
        "total_reviews": reviews["total"],
        "pending_reviews": reviews["pending"] or 0,
        "average_rating": round(avg_rating, 2) if avg_rating is not None else None,
    }


def get_recent_activity(limit: int = 20) -> list[dict]:
    """Signups, diagnoses and checkouts merged newest first."""
    init_db()

    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT 'signup' AS type, email AS subject, created_at,
                   'New user registered' AS detail
            FROM users
            UNION ALL
            SELECT 'diagnosis' AS type, COALESCE(u.email, 'anonymous') AS subject,
                   d.created_at, 'Health check - Score: ' || d.health_score AS detail
            FROM pet_diagnoses d LEFT JOIN users u ON u.id = d.user_id
            UNION ALL
            SELECT 'checkout' AS type, COALESCE(customer_email, 'unknown') AS subject,
                   created_at, 'Checkout started: ' || product_id AS detail
            FROM checkout_sessions
            ORDER BY created_at DESC
            LIMIT ?
            """,
            (limit,),
        ).fetchall()

    return [
        {
            "type": row["type"],
            "user": row["subject"],
            "created_at": row["created_at"],
            "detail": row["detail"],
        }
        for row in rows
    ]


def list_users_with_usage(limit: int = 100) -> list[dict]:
    """Users with their diagnosis counts, newest accounts first."""
    init_db()

    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT u.id, u.email, u.created_at,
                   COUNT(d.id) AS diagnoses,
                   MAX(d.created_at) AS last_diagnosis_at
            FROM users u LEFT JOIN pet_diagnoses d ON d.user_id = u.id
            GROUP BY u.id
            ORDER BY u.created_at DESC
            LIMIT ?
            """,
            (limit,),
        ).fetchall()

    return [
        {
            "id": row["id"],
            "email": row["email"],
            "joined": row["created_at"],
            "diagnoses": row["diagnoses"],
            "last_diagnosis_at": row["last_diagnosis_at"],
        }
        for row in rows
    ]
