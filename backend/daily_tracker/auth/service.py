"""Authentication service: password hashing, credential checks, registration."""

import bcrypt

from ..storage import RecordStore
from .schemas import RegisterRequest, UserCreate, UserRecord


class DuplicateUserError(ValueError):
    """Email or phone already belongs to another account."""


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        return False


def authenticate_user(store: RecordStore, email: str, password: str) -> UserRecord | None:
    """Verify credentials and return the user, or None if invalid."""
    user = store.users.get_by_email(email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def ensure_identity_available(
    store: RecordStore, email: str | None, phone: str | None, user_id: str | None = None
) -> None:
    """Raise DuplicateUserError if email or phone is used by another account.

    Check-then-insert is not atomic; the database unique constraints are the
    final guard when a database is active.
    """
    if email:
        existing = store.users.get_by_email(email)
        if existing and existing.id != user_id:
            raise DuplicateUserError("Email already in use by another account")
    if phone:
        existing = store.users.get_by_phone(phone)
        if existing and existing.id != user_id:
            raise DuplicateUserError("Phone number already in use by another account")


def register_user(store: RecordStore, data: RegisterRequest) -> UserRecord:
    ensure_identity_available(store, data.email, data.phone)
    return store.users.create(
        UserCreate(
            username=data.username,
            email=data.email,
            phone=data.phone,
            password_hash=hash_password(data.password),
        )
    )
