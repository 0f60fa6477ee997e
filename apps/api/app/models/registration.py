from __future__ import annotations

import uuid
from enum import Enum

import sqlalchemy as sa
from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from app.models.prayer import Prayer


class RegistrationStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class Registration(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "registrations"
    __table_args__ = (
        sa.CheckConstraint("people >= 1", name="ck_registrations_people_positive"),
        # One confirmed registration per device and prayer
        sa.Index(
            "uq_registrations_prayer_device_confirmed",
            "prayer_id",
            "device_key",
            unique=True,
            postgresql_where=sa.text("status = 'CONFIRMED'"),
            sqlite_where=sa.text("status = 'CONFIRMED'"),
        ),
        sa.Index("ix_registrations_prayer_created_at", "prayer_id", "created_at"),
    )

    prayer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("prayers.id", ondelete="CASCADE"), nullable=False
    )
    people: Mapped[int] = mapped_column(Integer, nullable=False)
    device_key: Mapped[str] = mapped_column(String(128), nullable=False)
    lang: Mapped[str] = mapped_column(String(8), nullable=False, default="en")

    status: Mapped[RegistrationStatus] = mapped_column(
        sa.Enum(RegistrationStatus, name="registration_status"),
        nullable=False,
        default=RegistrationStatus.CONFIRMED,
        server_default=RegistrationStatus.CONFIRMED.value,
    )

    # JSON text of the confirmation payload rendered as a QR code by clients
    qr_payload: Mapped[str] = mapped_column(Text, nullable=False)

    prayer: Mapped[Prayer] = relationship(Prayer)
