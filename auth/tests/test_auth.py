# auth/tests/test_auth.py
"""
Tests for the authentication module.

Tests:
- User and Session models
- Password hashing
- User service (create, lookup, authenticate)
- Session service (create, validate, invalidate, expiry)
"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest


@pytest.fixture(autouse=True)
def _db(fresh_db):
    yield


# =============================================================================
# Model Tests
# =============================================================================


class TestUserModel:
    def test_user_new_generates_id(self):
        from auth.models import User

        user = User.new(email="test@example.com", password_hash="hash123")
        assert len(user.id) == 36  # UUID format

    def test_user_new_normalizes_email(self):
        from auth.models import User

        user = User.new(email="  TEST@Example.COM  ", password_hash="hash")
        assert user.email == "test@example.com"

    def test_display_name_is_email_local_part(self):
        from auth.models import User

        user = User.new(email="whiskers.owner@example.com", password_hash="hash")
        assert user.display_name == "whiskers.owner"

    def test_to_dict_excludes_password_hash(self):
        from auth.models import User

        user = User.new(email="test@example.com", password_hash="secret_hash")
        data = user.to_dict()

        assert "password_hash" not in data
        assert data["email"] == "test@example.com"


class TestSessionModel:
    def test_session_defaults_to_seven_days(self):
        from auth.models import Session

        session = Session.new(user_id="user-123")
        assert session.expires_at - session.created_at == timedelta(days=7)
        assert session.is_valid

    def test_expired_session_is_invalid(self):
        from auth.models import Session

        session = Session.new(user_id="user-123")
        session.expires_at = datetime.utcnow() - timedelta(seconds=1)
        assert not session.is_valid


# =============================================================================
# Password Tests
# =============================================================================


class TestPassword:
    def test_hash_and_verify(self):
        from auth.password import hash_password, verify_password

        hashed = hash_password("kibble123")
        assert hashed != "kibble123"
        assert verify_password("kibble123", hashed)
        assert not verify_password("wrong", hashed)

    def test_hash_empty_password_raises(self):
        from auth.password import hash_password

        with pytest.raises(ValueError):
            hash_password("")

    def test_verify_garbage_hash_returns_false(self):
        from auth.password import verify_password

        assert verify_password("kibble123", "not-a-bcrypt-hash") is False

    def test_minimum_length_is_six(self):
        from auth.password import is_password_strong

        assert is_password_strong("12345") == (False, "Password must be at least 6 characters")
        assert is_password_strong("123456") == (True, "")


# =============================================================================
# User Service Tests
# =============================================================================


class TestUserService:
    def test_create_user(self):
        from auth.service import create_user, get_user_by_email

        user = create_user("owner@example.com", "kibble123")

        found = get_user_by_email("OWNER@example.com")
        assert found is not None
        assert found.id == user.id

    def test_create_duplicate_email_raises(self):
        from auth.service import UserExistsError, create_user

        create_user("owner@example.com", "kibble123")
        with pytest.raises(UserExistsError, match="This email is already registered"):
            create_user("Owner@Example.com", "another123")

    def test_create_user_weak_password_raises(self):
        from auth.service import WeakPasswordError, create_user

        with pytest.raises(WeakPasswordError):
            create_user("owner@example.com", "123")

    def test_authenticate_user(self):
        from auth.service import authenticate_user, create_user

        created = create_user("owner@example.com", "kibble123")
        user = authenticate_user("owner@example.com", "kibble123")
        assert user.id == created.id

    def test_authenticate_wrong_password(self):
        from auth.service import InvalidCredentialsError, authenticate_user, create_user

        create_user("owner@example.com", "kibble123")
        with pytest.raises(InvalidCredentialsError, match="Invalid email or password"):
            authenticate_user("owner@example.com", "wrong-pass")

    def test_authenticate_unknown_user(self):
        from auth.service import InvalidCredentialsError, authenticate_user

        with pytest.raises(InvalidCredentialsError):
            authenticate_user("nobody@example.com", "kibble123")


# =============================================================================
# Session Service Tests
# =============================================================================


class TestSessionService:
    def test_session_resolves_to_user(self):
        from auth.service import create_session, create_user, get_current_user

        user = create_user("owner@example.com", "kibble123")
        session = create_session(user.id, ip_address="10.0.0.1")

        current = get_current_user(session.id)
        assert current is not None
        assert current.id == user.id

    def test_invalidated_session_resolves_to_none(self):
        from auth.service import create_session, create_user, get_current_user, invalidate_session

        user = create_user("owner@example.com", "kibble123")
        session = create_session(user.id)

        assert invalidate_session(session.id) is True
        assert get_current_user(session.id) is None
        assert invalidate_session(session.id) is False

    def test_no_session_id_is_anonymous(self):
        from auth.service import get_current_user

        assert get_current_user(None) is None
        assert get_current_user("missing") is None

    def test_expired_session_is_removed(self):
        from auth.service import create_session, create_user, get_session

        user = create_user("owner@example.com", "kibble123")
        session = create_session(user.id, duration_days=-1)

        assert get_session(session.id) is None

    def test_cleanup_expired_sessions(self):
        from auth.service import cleanup_expired_sessions, create_session, create_user

        user = create_user("owner@example.com", "kibble123")
        create_session(user.id, duration_days=-1)
        create_session(user.id)

        assert cleanup_expired_sessions() == 1
