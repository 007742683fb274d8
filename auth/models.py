# auth/models.py
"""
Account and login session records.

Both map one-to-one onto rows of the ``users`` and ``sessions`` tables;
timestamps are naive UTC and stored as ISO strings.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

SESSION_DURATION_DAYS = 7

# Shown on reviews when the email has no usable local part
ANONYMOUS_NAME = "Anonymous User"


def _parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value)


@dataclass
class User:
    """A pet owner account. ``email`` is stored lowercased and trimmed."""

    id: str
    email: str
    password_hash: str
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def new(cls, email: str, password_hash: str) -> User:
        now = datetime.utcnow()
        return cls(
            id=str(uuid.uuid4()),
            email=email.lower().strip(),
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_row(cls, row) -> User:
        return cls(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            created_at=_parse_ts(row["created_at"]),
            updated_at=_parse_ts(row["updated_at"]),
        )

    @property
    def display_name(self) -> str:
        """Public author name on reviews: the local part of the email."""
        return self.email.split("@")[0] or ANONYMOUS_NAME

    def to_row(self) -> tuple:
        return (
            self.id,
            self.email,
            self.password_hash,
            self.created_at.isoformat(),
            self.updated_at.isoformat(),
        )

    def to_dict(self) -> dict:
        # Never includes password_hash
        return {
            "id": self.id,
            "email": self.email,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class Session:
    """
    Login session behind the session cookie.

    The id is the cookie value. ip_address and user_agent are kept for
    the admin activity view only.
    """

    id: str
    user_id: str
    created_at: datetime = field(default_factory=datetime.utcnow)
    expires_at: datetime = field(
        default_factory=lambda: datetime.utcnow() + timedelta(days=SESSION_DURATION_DAYS)
    )
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def new(
        cls,
        user_id: str,
        duration_days: int = SESSION_DURATION_DAYS,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Session:
        now = datetime.utcnow()
        return cls(
            id=str(uuid.uuid4()),
            user_id=user_id,
            created_at=now,
            expires_at=now + timedelta(days=duration_days),
            ip_address=ip_address,
            user_agent=user_agent,
        )

    @classmethod
    def from_row(cls, row) -> Session:
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            created_at=_parse_ts(row["created_at"]),
            expires_at=_parse_ts(row["expires_at"]),
            ip_address=row["ip_address"],
            user_agent=row["user_agent"],
        )

    @property
    def is_valid(self) -> bool:
        return datetime.utcnow() < self.expires_at

    def to_row(self) -> tuple:
        return (
            self.id,
            self.user_id,
            self.created_at.isoformat(),
            self.expires_at.isoformat(),
            self.ip_address,
            self.user_agent,
        )
