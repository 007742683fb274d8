# persistence/__init__.py
"""
Persistence layer.

Provides SQLite-backed storage for:
- Diagnosis history
- Users and sessions (see auth)
- Reviews
- Vault secrets and checkout audit rows
- Admin dashboard aggregates
"""

from persistence.db import get_db, init_db
from persistence.diagnoses import save_diagnosis, get_diagnosis, list_diagnoses_for_user
from persistence.reviews import save_review, list_approved_reviews, approve_review
from persistence.vault import get_secret, put_secret

__all__ = [
    "get_db",
    "init_db",
    "save_diagnosis",
    "get_diagnosis",
    "list_diagnoses_for_user",
    "save_review",
    "list_approved_reviews",
    "approve_review",
    "get_secret",
    "put_secret",
]
