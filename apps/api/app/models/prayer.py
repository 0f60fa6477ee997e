from __future__ import annotations

from datetime import datetime
from enum import Enum

import sqlalchemy as sa
from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UTCDateTime, UUIDPrimaryKeyMixin


class PrayerStatus(str, Enum):
    OPEN = "open"
    FULL = "full"
    CLOSED = "closed"


class Prayer(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "prayers"
    __table_args__ = (
        sa.CheckConstraint("capacity > 0", name="ck_prayers_capacity_positive"),
        sa.Index("ix_prayers_scheduled_at", "scheduled_at"),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    scheduled_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    location: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Manual override set by an admin
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Opens registration from the preceding Saturday until the prayer starts
    auto_activation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
