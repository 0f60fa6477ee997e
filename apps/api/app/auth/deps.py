from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.auth.jwt import verify_access_token
from app.core.config import settings
from app.db import get_db
from app.models import AdminUser

DBSession = Annotated[Session, Depends(get_db)]


def _unauthorized(detail: str = "unauthorized") -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _dev_admin(db: Session, token: str) -> AdminUser:
    prefix = settings.dev_auth_prefix
    if not token.startswith(prefix):
        raise _unauthorized(f"invalid dev token (expected prefix {prefix})")

    email = token.removeprefix(prefix).strip().lower()
    if "@" not in email:
        raise _unauthorized("invalid email in token")

    admin = db.scalar(select(AdminUser).where(AdminUser.email == email))
    if not admin or not admin.active:
        raise _unauthorized("unknown admin")
    return admin


def get_current_admin(request: Request, db: DBSession) -> AdminUser:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        raise _unauthorized("missing bearer token")

    token = auth.removeprefix("Bearer ").strip()

    # Local dev auth only
    if settings.auth_mode == "dev" and settings.env == "local":
        return _dev_admin(db, token)

    try:
        claims = verify_access_token(token)
    except ValueError:
        raise _unauthorized("invalid access token") from None

    admin = db.get(AdminUser, claims.admin_id)
    if not admin or not admin.active:
        raise _unauthorized("admin not found or inactive")
    return admin


CurrentAdmin = Annotated[AdminUser, Depends(get_current_admin)]
