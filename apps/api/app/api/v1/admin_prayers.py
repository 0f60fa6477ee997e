from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.api.errors import http_error_from_service
from app.api.v1.schemas import (
    AdminRegistrationOut,
    OkOut,
    PrayerCreate,
    PrayerDetailOut,
    PrayerOut,
    PrayerUpdate,
)
from app.auth.deps import get_current_admin
from app.db import get_db
from app.services import prayers_service, registration_service
from app.services.exceptions import ServiceError
from app.services.prayers_service import PrayerSummary

router = APIRouter(
    prefix="/admin/prayers",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
)

DBSession = Annotated[Session, Depends(get_db)]


def _detail(summary: PrayerSummary) -> PrayerDetailOut:
    base = PrayerOut.model_validate(summary.prayer)
    return PrayerDetailOut(
        **base.model_dump(),
        remaining=summary.remaining,
        status=summary.status,
        registration_count=summary.registration_count,
        total_people=summary.total_people,
    )


@router.get("", response_model=list[PrayerDetailOut])
def list_prayers(db: DBSession):
    return [_detail(summary) for summary in prayers_service.list_prayers(db)]


@router.post("", response_model=PrayerOut, status_code=201)
def create_prayer(payload: PrayerCreate, db: DBSession):
    return prayers_service.create_prayer(db, payload)


@router.get("/{prayer_id}", response_model=PrayerDetailOut)
def get_prayer(prayer_id: uuid.UUID, db: DBSession):
    try:
        return _detail(prayers_service.get_prayer(db, prayer_id))
    except ServiceError as err:
        raise http_error_from_service(err) from None


@router.patch("/{prayer_id}", response_model=PrayerOut)
def update_prayer(prayer_id: uuid.UUID, patch: PrayerUpdate, db: DBSession):
    try:
        return prayers_service.update_prayer(db, prayer_id, patch)
    except ServiceError as err:
        raise http_error_from_service(err) from None


@router.delete("/{prayer_id}", response_model=OkOut)
def delete_prayer(prayer_id: uuid.UUID, db: DBSession):
    try:
        prayers_service.delete_prayer(db, prayer_id)
    except ServiceError as err:
        raise http_error_from_service(err) from None
    return OkOut()


@router.get("/{prayer_id}/registrations", response_model=list[AdminRegistrationOut])
def list_prayer_registrations(prayer_id: uuid.UUID, db: DBSession):
    try:
        prayers_service.get_prayer(db, prayer_id)
    except ServiceError as err:
        raise http_error_from_service(err) from None
    return registration_service.list_registrations(db, prayer_id)


@router.get("/{prayer_id}/export")
def export_registrations(prayer_id: uuid.UUID, db: DBSession):
    try:
        content = prayers_service.export_registrations_csv(db, prayer_id)
    except ServiceError as err:
        raise http_error_from_service(err) from None

    return Response(
        content=content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="prayer-{prayer_id}-registrations.csv"'
        },
    )
