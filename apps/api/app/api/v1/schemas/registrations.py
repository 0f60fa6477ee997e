from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.api.v1.schemas.prayers import SchemaBase
from app.core.config import settings
from app.models.registration import RegistrationStatus


class QRPayload(BaseModel):
    pid: UUID
    date: str
    ppl: int


class RegistrationCreate(BaseModel):
    prayer_id: UUID
    people: int = Field(ge=settings.min_party_size, le=settings.max_party_size, strict=True)
    device_key: str = Field(min_length=1, max_length=128)
    lang: str = Field(default="en", min_length=1, max_length=8)


class RegistrationUpdate(BaseModel):
    people: int = Field(ge=settings.min_party_size, le=settings.max_party_size, strict=True)


class RegistrationCreatedOut(BaseModel):
    id: UUID
    qr: QRPayload


class RegistrationPrayerOut(SchemaBase):
    id: UUID
    title: str
    scheduled_at: datetime
    location: str


class RegistrationOut(SchemaBase):
    id: UUID
    prayer: RegistrationPrayerOut
    people: int
    status: RegistrationStatus
    qr_payload: QRPayload
    created_at: datetime


class AdminRegistrationOut(SchemaBase):
    id: UUID
    people: int
    lang: str
    status: RegistrationStatus
    created_at: datetime
    updated_at: datetime


class OkOut(BaseModel):
    ok: bool = True
