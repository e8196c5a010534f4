"""Tests for authentication service."""

import pytest

from daily_tracker.auth.schemas import RegisterRequest
from daily_tracker.auth.service import (
    DuplicateUserError,
    authenticate_user,
    ensure_identity_available,
    hash_password,
    register_user,
    verify_password,
)


def _registration(email="auth@example.com", phone="+15551234", password="mypassword"):
    return RegisterRequest(username="auth", email=email, phone=phone, password=password)


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("test_password_123")
        assert hashed != "test_password_123"
        assert verify_password("test_password_123", hashed)

    def test_wrong_password_fails(self):
        assert not verify_password("wrong_password", hash_password("correct_password"))

    def test_malformed_hash_fails(self):
        assert not verify_password("anything", "not-a-bcrypt-hash")


class TestRegisterUser:
    def test_stores_hashed_password(self, memory_store):
        user = register_user(memory_store, _registration())
        assert user.password_hash != "mypassword"
        assert verify_password("mypassword", user.password_hash)

    def test_duplicate_email(self, memory_store):
        register_user(memory_store, _registration())
        with pytest.raises(DuplicateUserError, match="Email"):
            register_user(memory_store, _registration(phone="+15559999"))

    def test_duplicate_phone(self, memory_store):
        register_user(memory_store, _registration())
        with pytest.raises(DuplicateUserError, match="Phone"):
            register_user(memory_store, _registration(email="other@example.com"))


class TestEnsureIdentityAvailable:
    def test_own_identity_is_allowed(self, memory_store):
        user = register_user(memory_store, _registration())
        ensure_identity_available(memory_store, user.email, user.phone, user_id=user.id)

    def test_none_values_skip_checks(self, memory_store):
        register_user(memory_store, _registration())
        ensure_identity_available(memory_store, None, None, user_id="someone-else")


class TestAuthenticateUser:
    def test_valid_credentials(self, memory_store):
        register_user(memory_store, _registration())
        result = authenticate_user(memory_store, "auth@example.com", "mypassword")
        assert result is not None
        assert result.email == "auth@example.com"

    def test_wrong_password(self, memory_store):
        register_user(memory_store, _registration())
        assert authenticate_user(memory_store, "auth@example.com", "wrongpassword") is None

    def test_nonexistent_user(self, memory_store):
        assert authenticate_user(memory_store, "nobody@example.com", "password") is None
