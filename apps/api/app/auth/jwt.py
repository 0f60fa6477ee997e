from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from jwt import PyJWTError

from app.core.config import settings

TOKEN_SCOPE = "admin"


@dataclass(frozen=True)
class AdminClaims:
    admin_id: uuid.UUID
    email: str
    expires_at: datetime


def create_access_token(admin_id: uuid.UUID, email: str, ttl_seconds: int | None = None) -> str:
    issued_at = datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(seconds=ttl_seconds or settings.access_token_ttl_seconds)
    claims = {
        "sub": str(admin_id),
        "email": email,
        "scope": TOKEN_SCOPE,
        "iat": issued_at,
        "exp": expires_at,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> AdminClaims:
    """Decode an admin access token; any problem surfaces as ValueError."""
    try:
        raw = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            options={"require": ["sub", "exp", "iat"]},
        )
    except PyJWTError as exc:
        raise ValueError("invalid access token") from exc

    if raw.get("scope") != TOKEN_SCOPE:
        raise ValueError("token is not an admin token")
    return AdminClaims(
        admin_id=uuid.UUID(raw["sub"]),
        email=raw.get("email", ""),
        expires_at=datetime.fromtimestamp(raw["exp"], tz=timezone.utc),
    )
