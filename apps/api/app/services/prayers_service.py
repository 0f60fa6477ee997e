from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.api.v1.schemas.prayers import PrayerCreate, PrayerUpdate
from app.models import Prayer, Registration
from app.models.prayer import PrayerStatus
from app.models.registration import RegistrationStatus
from app.services.availability import derive_status
from app.services.error_codes import ErrorCode
from app.services.exceptions import ConflictError, NotFoundError
from app.services.registration_service import confirmed_total, list_registrations

logger = structlog.get_logger(__name__)

CSV_HEADERS = ["ID", "People", "Language", "Status", "Created At", "Updated At"]
NULLABLE_TEXT_FIELDS = {"location", "notes"}


@dataclass
class PrayerSummary:
    prayer: Prayer
    registration_count: int
    total_people: int
    remaining: int
    status: PrayerStatus


def _summarize(prayer: Prayer, count: int, total: int, now: datetime) -> PrayerSummary:
    remaining = prayer.capacity - total
    return PrayerSummary(
        prayer=prayer,
        registration_count=count,
        total_people=total,
        remaining=remaining,
        status=derive_status(prayer, remaining, now),
    )


def list_prayers(db: Session, now: datetime | None = None) -> list[PrayerSummary]:
    now = now or datetime.now(timezone.utc)
    totals = (
        select(
            Registration.prayer_id.label("prayer_id"),
            func.count(Registration.id).label("registration_count"),
            func.sum(Registration.people).label("total_people"),
        )
        .where(Registration.status == RegistrationStatus.CONFIRMED)
        .group_by(Registration.prayer_id)
        .subquery()
    )
    rows = db.execute(
        select(
            Prayer,
            func.coalesce(totals.c.registration_count, 0),
            func.coalesce(totals.c.total_people, 0),
        )
        .outerjoin(totals, totals.c.prayer_id == Prayer.id)
        .order_by(Prayer.scheduled_at.asc())
    ).all()
    return [_summarize(prayer, int(count), int(total), now) for prayer, count, total in rows]


def list_open_prayers(db: Session, now: datetime | None = None) -> list[dict[str, Any]]:
    """Public board: every prayer with its remaining seats and derived status."""
    return [
        {
            "id": summary.prayer.id,
            "title": summary.prayer.title,
            "scheduled_at": summary.prayer.scheduled_at,
            "location": summary.prayer.location,
            "capacity": summary.prayer.capacity,
            "remaining": summary.remaining,
            "status": summary.status,
        }
        for summary in list_prayers(db, now)
    ]


def get_prayer(db: Session, prayer_id: Any, now: datetime | None = None) -> PrayerSummary:
    prayer = db.get(Prayer, prayer_id)
    if not prayer:
        raise NotFoundError(ErrorCode.PRAYER_NOT_FOUND.value, "prayer not found")

    count = int(
        db.scalar(
            select(func.count())
            .select_from(Registration)
            .where(
                Registration.prayer_id == prayer.id,
                Registration.status == RegistrationStatus.CONFIRMED,
            )
        )
        or 0
    )
    return _summarize(prayer, count, confirmed_total(db, prayer.id), now or datetime.now(timezone.utc))


def create_prayer(db: Session, payload: PrayerCreate) -> Prayer:
    prayer = Prayer(
        title=payload.title,
        scheduled_at=payload.scheduled_at,
        capacity=payload.capacity,
        location=payload.location or "",
        notes=payload.notes or "",
        active=payload.active,
        auto_activation=payload.auto_activation,
    )
    db.add(prayer)
    db.commit()
    db.refresh(prayer)
    logger.info("prayer_created", prayer_id=str(prayer.id), capacity=prayer.capacity)
    return prayer


def update_prayer(db: Session, prayer_id: Any, patch: PrayerUpdate) -> Prayer:
    try:
        prayer = db.scalar(select(Prayer).where(Prayer.id == prayer_id).with_for_update())
        if not prayer:
            raise NotFoundError(ErrorCode.PRAYER_NOT_FOUND.value, "prayer not found")

        patch_data = patch.model_dump(exclude_unset=True)
        if patch_data.get("capacity") is not None:
            booked = confirmed_total(db, prayer.id)
            if patch_data["capacity"] < booked:
                raise ConflictError(
                    ErrorCode.CAPACITY_BELOW_CONFIRMED.value,
                    "capacity cannot be below confirmed attendance",
                )

        for key, value in patch_data.items():
            if value is None:
                if key not in NULLABLE_TEXT_FIELDS:
                    continue
                value = ""
            setattr(prayer, key, value)

        db.add(prayer)
        db.commit()
    except (NotFoundError, ConflictError):
        db.rollback()
        raise

    db.refresh(prayer)
    logger.info("prayer_updated", prayer_id=str(prayer.id), fields=sorted(patch_data))
    return prayer


def delete_prayer(db: Session, prayer_id: Any) -> None:
    prayer = db.get(Prayer, prayer_id)
    if not prayer:
        db.rollback()
        raise NotFoundError(ErrorCode.PRAYER_NOT_FOUND.value, "prayer not found")

    result = db.execute(delete(Registration).where(Registration.prayer_id == prayer.id))
    db.delete(prayer)
    db.commit()
    logger.info(
        "prayer_deleted",
        prayer_id=str(prayer_id),
        registrations_deleted=result.rowcount or 0,
    )


def export_registrations_csv(db: Session, prayer_id: Any) -> str:
    prayer = db.get(Prayer, prayer_id)
    if not prayer:
        raise NotFoundError(ErrorCode.PRAYER_NOT_FOUND.value, "prayer not found")

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for reg in list_registrations(db, prayer.id):
        writer.writerow(
            [
                str(reg.id),
                reg.people,
                reg.lang,
                reg.status.value,
                reg.created_at.isoformat(),
                reg.updated_at.isoformat(),
            ]
        )
    return buffer.getvalue()
