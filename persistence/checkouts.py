"""
Checkout session audit log.

One row per checkout session the provider created. Nothing here is used
for entitlement decisions; it only feeds the admin dashboard.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from persistence.db import get_db, init_db


def record_checkout(
    checkout_id: str,
    product_id: str,
    customer_email: Optional[str] = None,
) -> None:
    """Record a created checkout session."""
    init_db()

    with get_db() as conn:
        conn.execute(
            """
            INSERT OR IGNORE INTO checkout_sessions
            (id, product_id, customer_email, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (checkout_id, product_id, customer_email, datetime.utcnow().isoformat()),
        )


def get_checkout_count() -> int:
    init_db()

    with get_db() as conn:
        row = conn.execute("SELECT COUNT(*) AS n FROM checkout_sessions").fetchone()
    return row["n"]
