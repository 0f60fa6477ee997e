from __future__ import annotations

import uuid

import jwt
import pytest

from app.auth.jwt import create_access_token, verify_access_token
from app.auth.password import check_password_policy, hash_password, verify_password
from app.core.config import settings
from app.middleware.rate_limit import parse_rate, rate_for
from app.middleware.security_headers import headers_for


def test_password_hash_roundtrip():
    hashed = hash_password("StrongPass123")

    assert verify_password("StrongPass123", hashed)
    assert not verify_password("StrongPass124", hashed)
    assert not verify_password("StrongPass123", "not-an-argon2-hash")


@pytest.mark.parametrize("password", ["short1", "onlyletterslong", "12345678901234"])
def test_password_policy_rejects_weak_passwords(password):
    with pytest.raises(ValueError):
        check_password_policy(password)


def test_access_token_claims():
    admin_id = uuid.uuid4()

    claims = verify_access_token(create_access_token(admin_id, "admin@example.com"))

    assert claims.admin_id == admin_id
    assert claims.email == "admin@example.com"


def test_expired_token_is_rejected():
    token = create_access_token(uuid.uuid4(), "admin@example.com", ttl_seconds=-10)

    with pytest.raises(ValueError):
        verify_access_token(token)


def test_token_without_admin_scope_is_rejected():
    token = jwt.encode(
        {
            "sub": str(uuid.uuid4()),
            "iat": 1_700_000_000,
            "exp": 4_000_000_000,
            "iss": settings.jwt_issuer,
            "aud": settings.jwt_audience,
        },
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )

    with pytest.raises(ValueError):
        verify_access_token(token)


@pytest.mark.parametrize(
    "rate, expected",
    [("60/minute", (60, 60)), ("10/second", (10, 1)), ("500/day", (500, 86400))],
)
def test_parse_rate(rate, expected):
    assert parse_rate(rate) == expected


@pytest.mark.parametrize("rate", ["60", "60/fortnight", "x/minute"])
def test_parse_rate_rejects_bad_formats(rate):
    with pytest.raises(ValueError):
        parse_rate(rate)


def test_registration_writes_share_one_bucket():
    first = rate_for("PATCH", f"/v1/registrations/{uuid.uuid4()}")
    second = rate_for("PATCH", f"/v1/registrations/{uuid.uuid4()}")

    assert first == second
    assert first[0] == settings.rate_limit_registrations
    assert rate_for("GET", "/v1/prayers")[0] == settings.rate_limit_default


def test_no_store_only_on_sensitive_paths():
    assert headers_for("/v1/registrations/abc", "local")["Cache-Control"] == "no-store"
    assert "Cache-Control" not in headers_for("/v1/prayers", "local")
    assert "Strict-Transport-Security" in headers_for("/v1/prayers", "production")
    assert "Strict-Transport-Security" not in headers_for("/v1/prayers", "local")
