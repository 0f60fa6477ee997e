from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.errors import http_error_from_service
from app.api.v1.schemas import (
    OkOut,
    QRPayload,
    RegistrationCreate,
    RegistrationCreatedOut,
    RegistrationOut,
    RegistrationPrayerOut,
    RegistrationUpdate,
)
from app.db import get_db
from app.services import registration_service
from app.services.confirmation import load_payload
from app.services.exceptions import ServiceError

router = APIRouter(prefix="/registrations", tags=["registrations"])

DBSession = Annotated[Session, Depends(get_db)]


@router.post("", response_model=RegistrationCreatedOut)
def create_registration(payload: RegistrationCreate, db: DBSession):
    try:
        registration = registration_service.admit(
            db,
            payload.prayer_id,
            payload.people,
            payload.device_key,
            lang=payload.lang,
        )
    except ServiceError as err:
        raise http_error_from_service(err) from None

    return RegistrationCreatedOut(
        id=registration.id,
        qr=QRPayload(**load_payload(registration.qr_payload)),
    )


@router.get("/{registration_id}", response_model=RegistrationOut)
def get_registration(registration_id: uuid.UUID, db: DBSession):
    try:
        registration = registration_service.get_registration(db, registration_id)
    except ServiceError as err:
        raise http_error_from_service(err) from None

    return RegistrationOut(
        id=registration.id,
        prayer=RegistrationPrayerOut.model_validate(registration.prayer),
        people=registration.people,
        status=registration.status,
        qr_payload=QRPayload(**load_payload(registration.qr_payload)),
        created_at=registration.created_at,
    )


@router.patch("/{registration_id}", response_model=OkOut)
def update_registration(registration_id: uuid.UUID, payload: RegistrationUpdate, db: DBSession):
    try:
        registration_service.amend(db, registration_id, payload.people)
    except ServiceError as err:
        raise http_error_from_service(err) from None
    return OkOut()


@router.delete("/{registration_id}", response_model=OkOut)
def cancel_registration(registration_id: uuid.UUID, db: DBSession):
    try:
        registration_service.cancel(db, registration_id)
    except ServiceError as err:
        raise http_error_from_service(err) from None
    return OkOut()
