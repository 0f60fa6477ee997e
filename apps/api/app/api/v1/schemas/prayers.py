from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.prayer import PrayerStatus


def _ensure_tzaware(value: datetime | None) -> datetime | None:
    if value is None:
        return value
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        raise ValueError("datetime must be timezone-aware")
    return value


class SchemaBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


class TZAwareMixin(BaseModel):
    @field_validator(
        "scheduled_at",
        "created_at",
        "updated_at",
        mode="after",
        check_fields=False,
    )
    @classmethod
    def _validate_tzaware(cls, value: datetime | None) -> datetime | None:
        return _ensure_tzaware(value)


class PrayerCreate(TZAwareMixin, SchemaBase):
    title: str = Field(min_length=1, max_length=200)
    scheduled_at: datetime
    capacity: int = Field(ge=1)
    location: str | None = Field(default=None, max_length=300)
    notes: str | None = None
    active: bool = False
    auto_activation: bool = True


class PrayerUpdate(TZAwareMixin, SchemaBase):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    scheduled_at: datetime | None = None
    capacity: int | None = Field(default=None, ge=1)
    location: str | None = Field(default=None, max_length=300)
    notes: str | None = None
    active: bool | None = None
    auto_activation: bool | None = None


class PublicPrayerOut(TZAwareMixin, SchemaBase):
    id: UUID
    title: str
    scheduled_at: datetime
    location: str
    capacity: int
    remaining: int
    status: PrayerStatus


class PrayerOut(TZAwareMixin, SchemaBase):
    id: UUID
    title: str
    scheduled_at: datetime
    capacity: int
    location: str
    notes: str
    active: bool
    auto_activation: bool
    created_at: datetime
    updated_at: datetime


class PrayerDetailOut(PrayerOut):
    remaining: int
    status: PrayerStatus
    registration_count: int = Field(ge=0)
    total_people: int = Field(ge=0)
