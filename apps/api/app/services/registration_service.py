from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models import Prayer, Registration
from app.models.prayer import PrayerStatus
from app.models.registration import RegistrationStatus
from app.services.availability import derive_status
from app.services.confirmation import build_payload, dump_payload
from app.services.error_codes import ErrorCode
from app.services.exceptions import (
    CapacityExceededError,
    DuplicateDeviceError,
    InactiveRegistrationError,
    InvalidInputError,
    NotFoundError,
    RegistrationClosedError,
    ServiceError,
)

logger = structlog.get_logger(__name__)


def _validate_people(people: Any) -> int:
    if isinstance(people, bool) or not isinstance(people, int):
        raise InvalidInputError("people must be an integer")
    if not settings.min_party_size <= people <= settings.max_party_size:
        raise InvalidInputError(
            f"people must be between {settings.min_party_size} and {settings.max_party_size}"
        )
    return people


def _lock_prayer(db: Session, prayer_id: Any) -> Prayer | None:
    return db.scalar(select(Prayer).where(Prayer.id == prayer_id).with_for_update())


def confirmed_total(db: Session, prayer_id: Any, exclude_id: Any | None = None) -> int:
    stmt = select(func.coalesce(func.sum(Registration.people), 0)).where(
        Registration.prayer_id == prayer_id,
        Registration.status == RegistrationStatus.CONFIRMED,
    )
    if exclude_id is not None:
        stmt = stmt.where(Registration.id != exclude_id)
    return int(db.scalar(stmt) or 0)


def admit(
    db: Session,
    prayer_id: Any,
    people: int,
    device_key: str,
    lang: str = "en",
    now: datetime | None = None,
) -> Registration:
    people = _validate_people(people)
    device_key = (device_key or "").strip()
    if not device_key:
        raise InvalidInputError("device_key is required")

    now = now or datetime.now(timezone.utc)
    try:
        prayer = _lock_prayer(db, prayer_id)
        if not prayer:
            raise NotFoundError(ErrorCode.PRAYER_NOT_FOUND.value, "prayer not found")

        remaining = prayer.capacity - confirmed_total(db, prayer.id)
        if derive_status(prayer, remaining, now) == PrayerStatus.CLOSED:
            raise RegistrationClosedError()
        if remaining < people:
            raise CapacityExceededError()

        existing = db.scalar(
            select(Registration.id).where(
                Registration.prayer_id == prayer.id,
                Registration.device_key == device_key,
                Registration.status == RegistrationStatus.CONFIRMED,
            )
        )
        if existing:
            raise DuplicateDeviceError()

        created_at = datetime.now(timezone.utc)
        registration = Registration(
            id=uuid.uuid4(),
            prayer_id=prayer.id,
            people=people,
            device_key=device_key,
            lang=lang or "en",
            status=RegistrationStatus.CONFIRMED,
            qr_payload=dump_payload(build_payload(prayer.id, created_at, people)),
            created_at=created_at,
            updated_at=created_at,
        )
        db.add(registration)
        db.commit()
    except IntegrityError as exc:
        # Partial unique index caught a concurrent admission from the same device
        db.rollback()
        logger.info(
            "registration_rejected",
            prayer_id=str(prayer_id),
            people=people,
            code=ErrorCode.DEVICE_ALREADY_REGISTERED.value,
        )
        raise DuplicateDeviceError() from exc
    except ServiceError as exc:
        db.rollback()
        logger.info(
            "registration_rejected",
            prayer_id=str(prayer_id),
            people=people,
            code=exc.code,
        )
        raise

    logger.info(
        "registration_admitted",
        registration_id=str(registration.id),
        prayer_id=str(registration.prayer_id),
        people=people,
        remaining=remaining - people,
    )
    return registration


def amend(db: Session, registration_id: Any, people: int) -> Registration:
    people = _validate_people(people)
    try:
        registration = db.get(Registration, registration_id)
        if not registration:
            raise NotFoundError(
                ErrorCode.REGISTRATION_NOT_FOUND.value, "registration not found"
            )

        prayer = _lock_prayer(db, registration.prayer_id)
        if not prayer:
            raise NotFoundError(ErrorCode.PRAYER_NOT_FOUND.value, "prayer not found")

        # Re-read under the prayer lock so status and people are current
        registration = db.scalar(
            select(Registration)
            .where(Registration.id == registration.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if not registration:
            raise NotFoundError(
                ErrorCode.REGISTRATION_NOT_FOUND.value, "registration not found"
            )
        if registration.status != RegistrationStatus.CONFIRMED:
            raise InactiveRegistrationError()

        others = confirmed_total(db, prayer.id, exclude_id=registration.id)
        if others + people > prayer.capacity:
            raise CapacityExceededError()

        previous = registration.people
        registration.people = people
        registration.qr_payload = dump_payload(
            build_payload(prayer.id, registration.created_at, people)
        )
        db.add(registration)
        db.commit()
    except ServiceError as exc:
        db.rollback()
        logger.info(
            "registration_rejected",
            registration_id=str(registration_id),
            people=people,
            code=exc.code,
        )
        raise

    logger.info(
        "registration_amended",
        registration_id=str(registration.id),
        prayer_id=str(registration.prayer_id),
        previous_people=previous,
        people=people,
    )
    return registration


def cancel(db: Session, registration_id: Any) -> None:
    registration = db.get(Registration, registration_id)
    if not registration:
        db.rollback()
        raise NotFoundError(ErrorCode.REGISTRATION_NOT_FOUND.value, "registration not found")

    prayer_id = registration.prayer_id
    db.delete(registration)
    db.commit()
    logger.info(
        "registration_cancelled",
        registration_id=str(registration_id),
        prayer_id=str(prayer_id),
    )


def get_registration(db: Session, registration_id: Any) -> Registration:
    registration = db.get(Registration, registration_id)
    if not registration:
        raise NotFoundError(ErrorCode.REGISTRATION_NOT_FOUND.value, "registration not found")
    return registration


def list_registrations(db: Session, prayer_id: Any) -> list[Registration]:
    return list(
        db.scalars(
            select(Registration)
            .where(
                Registration.prayer_id == prayer_id,
                Registration.status == RegistrationStatus.CONFIRMED,
            )
            .order_by(Registration.created_at.asc())
        ).all()
    )
