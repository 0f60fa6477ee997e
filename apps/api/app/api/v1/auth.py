from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.auth.deps import CurrentAdmin
from app.auth.jwt import create_access_token
from app.auth.password import hash_password, needs_rehash, verify_password
from app.core.config import settings
from app.db import get_db
from app.models import AdminUser

router = APIRouter(prefix="/auth", tags=["auth"])

DBSession = Annotated[Session, Depends(get_db)]

logger = structlog.get_logger(__name__)


class AuthTokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    admin_id: str
    email: str


class LoginIn(BaseModel):
    email: EmailStr
    password: str


@router.post("/login", response_model=AuthTokenOut)
def login(payload: LoginIn, db: DBSession):
    email = payload.email.strip().lower()
    admin = db.scalar(select(AdminUser).where(AdminUser.email == email))
    if not admin or not verify_password(payload.password, admin.password_hash):
        logger.info("admin_login_failed", email=email)
        raise HTTPException(status_code=401, detail="invalid credentials")
    if not admin.active:
        raise HTTPException(status_code=403, detail="admin is not active")

    if needs_rehash(admin.password_hash):
        admin.password_hash = hash_password(payload.password)
    admin.last_login_at = datetime.now(timezone.utc)
    db.add(admin)
    db.commit()

    logger.info("admin_login", admin_id=str(admin.id))
    return AuthTokenOut(
        access_token=create_access_token(admin.id, admin.email),
        expires_in=settings.access_token_ttl_seconds,
        admin_id=str(admin.id),
        email=admin.email,
    )


class MeOut(BaseModel):
    admin_id: str
    email: str
    last_login_at: datetime | None


@router.get("/me", response_model=MeOut)
def me(admin: CurrentAdmin):
    return MeOut(admin_id=str(admin.id), email=admin.email, last_login_at=admin.last_login_at)
