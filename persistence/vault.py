"""
Secrets vault.

Provider API keys that must not live in the process environment are
stored here and looked up by name at request time.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from persistence.db import get_db, init_db

_logger = logging.getLogger(__name__)


def get_secret(name: str) -> Optional[str]:
    """Return the stored secret value, or None if not stored."""
    init_db()

    with get_db() as conn:
        row = conn.execute(
            "SELECT secret FROM vault_secrets WHERE name = ?",
            (name,),
        ).fetchone()

    if row is None or not row["secret"]:
        return None
    return row["secret"]


def put_secret(name: str, secret: str) -> None:
    """Insert or replace a secret."""
    if not secret:
        raise ValueError("Secret cannot be empty")

    init_db()

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO vault_secrets (name, secret, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(name) DO UPDATE SET
                secret = excluded.secret,
                updated_at = excluded.updated_at
            """,
            (name, secret, datetime.utcnow().isoformat()),
        )

    # Never log the value
    _logger.info(f"Stored secret {name}")


def delete_secret(name: str) -> bool:
    """Remove a secret. Returns True if it existed."""
    init_db()

    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM vault_secrets WHERE name = ?",
            (name,),
        )
        return cursor.rowcount > 0
