from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError

from app.core.config import settings

_hasher = PasswordHasher()


def check_password_policy(plain: str) -> None:
    """Reject admin passwords that are too short or single-class."""
    if len(plain or "") < settings.min_password_length:
        raise ValueError(f"password must be at least {settings.min_password_length} characters")
    if plain.isalpha() or plain.isdigit():
        raise ValueError("password must mix letters with digits or symbols")


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("password is required")
    try:
        return _hasher.hash(plain)
    except HashingError as exc:
        raise ValueError("failed to hash password") from exc


def verify_password(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    try:
        return _hasher.verify(hashed, plain)
    # VerifyMismatchError is a VerificationError
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(hashed: str) -> bool:
    return _hasher.check_needs_rehash(hashed)
