# persistence/db.py
"""
SQLite database connection and schema management.

Uses a file-based SQLite database for persistence.
On Railway, use a persistent volume to survive restarts.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path

_logger = logging.getLogger(__name__)

# Database file location (configurable via env var)
DEFAULT_DB_PATH = Path(__file__).parent.parent / "data" / "healpet.db"
DB_PATH = Path(os.environ.get("HEALPET_DB_PATH", str(DEFAULT_DB_PATH)))

# Connection pool (one connection per thread)
_local = threading.local()
_init_lock = threading.Lock()
_initialized = False

_TABLES = (
    "checkout_sessions",
    "vault_secrets",
    "pet_reviews",
    "pet_diagnoses",
    "sessions",
    "users",
)


def _get_connection() -> sqlite3.Connection:
    """Get thread-local database connection."""
    if not hasattr(_local, "connection") or _local.connection is None:
        if str(DB_PATH) != ":memory:":
            DB_PATH.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(
            str(DB_PATH),
            timeout=30.0,
            check_same_thread=False,
        )
        conn.execute("PRAGMA foreign_keys = ON")
        # Return rows as dicts
        conn.row_factory = sqlite3.Row
        _local.connection = conn

    return _local.connection


@contextmanager
def get_db():
    """
    Get database connection context manager.

    Usage:
        with get_db() as conn:
            cursor = conn.execute("SELECT ...")
    """
    conn = _get_connection()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise


def init_db() -> None:
    """
    Initialize database schema.

    Creates tables if they don't exist.
    Safe to call multiple times (idempotent).
    """
    global _initialized

    with _init_lock:
        if _initialized:
            return

        with get_db() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS sessions (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    expires_at TEXT NOT NULL,
                    ip_address TEXT,
                    user_agent TEXT,
                    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_sessions_user
                ON sessions(user_id)
            """)

            # Diagnosis history. user_id is not a foreign key: anonymous
            # analyses and unknown ids from the client are still recorded.
            conn.execute("""
                CREATE TABLE IF NOT EXISTS pet_diagnoses (
                    id TEXT PRIMARY KEY,
                    user_id TEXT,
                    image_url TEXT NOT NULL,
                    symptoms TEXT,
                    raw_diagnosis_result TEXT NOT NULL,
                    health_score INTEGER NOT NULL,
                    risk_level TEXT NOT NULL,
                    is_fallback INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_diagnoses_user
                ON pet_diagnoses(user_id, created_at DESC)
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS pet_reviews (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    user_name TEXT NOT NULL,
                    pet_type TEXT NOT NULL,
                    pet_name TEXT NOT NULL,
                    content TEXT NOT NULL,
                    rating INTEGER NOT NULL,
                    avatar_url TEXT,
                    approved INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_reviews_approved
                ON pet_reviews(approved, created_at DESC)
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS vault_secrets (
                    name TEXT PRIMARY KEY,
                    secret TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS checkout_sessions (
                    id TEXT PRIMARY KEY,
                    product_id TEXT NOT NULL,
                    customer_email TEXT,
                    created_at TEXT NOT NULL
                )
            """)

            _logger.info(f"Database initialized at {DB_PATH}")
            _initialized = True


def reset_db() -> None:
    """Reset database (for testing). Drops all tables."""
    global _initialized

    with _init_lock:
        with get_db() as conn:
            for table in _TABLES:
                conn.execute(f"DROP TABLE IF EXISTS {table}")
        _initialized = False


def get_db_path() -> Path:
    """Get the database file path."""
    return DB_PATH
